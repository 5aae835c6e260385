import re


# Session noise emitted by mysqldump / SQLyog around the real statements.
COMMENT_PREFIXES = ("--", "#", "/*!")
NOISE_KEYWORDS = re.compile(r"^(drop|set|use|lock|unlock)\b")

# SQLyog writes "/*Data for the table `x` */" right before each INSERT
LEADING_COMMENTS = re.compile(r"^\s*(?:/\*.*?\*/\s*)*", re.DOTALL)
INSERT_PREFIX = re.compile(r"^insert\s+into\b", re.IGNORECASE)

STATEMENT_TERMINATOR = ";"


def _is_noise(line: str) -> bool:
    text = line.strip().lower()
    if not text:
        return True
    if text.startswith(COMMENT_PREFIXES):
        return True
    return NOISE_KEYWORDS.match(text) is not None


def clean(raw: str) -> str:
    """
    Remove non-semantic lines from a dump, line by line.

    Blank lines, line comments, versioned comments and DROP/SET/USE/
    LOCK/UNLOCK lines are dropped. Every other line is kept verbatim and
    in its original order, so running clean() twice changes nothing.
    """
    return "\n".join(line for line in raw.split("\n") if not _is_noise(line))


def strip_leading_comments(statement: str) -> str:
    return LEADING_COMMENTS.sub("", statement, count=1)


def is_insert(statement: str) -> bool:
    return INSERT_PREFIX.match(strip_leading_comments(statement)) is not None


def split_statements(cleaned: str) -> tuple[str, str]:
    """
    Partition cleaned dump text into (ddl_text, insert_text).

    Statements are split on ';' and empty ones discarded. A ';' inside a
    string literal splits the statement too; dumps with embedded
    terminators are not supported.
    """
    statements = [s for s in cleaned.split(STATEMENT_TERMINATOR) if s.strip()]
    ddl = [s for s in statements if not is_insert(s)]
    inserts = [s for s in statements if is_insert(s)]
    return STATEMENT_TERMINATOR.join(ddl), STATEMENT_TERMINATOR.join(inserts)
