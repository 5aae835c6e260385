# ==============================================
# Tests for Preprocessing (cleaner)
# ==============================================

from dump2mongo.preprocess.cleaner import clean, is_insert, split_statements


RAW_DUMP = """-- MySQL dump 10.13
/*!40101 SET NAMES utf8 */;
# generated by hand
SET FOREIGN_KEY_CHECKS=0;
USE `shop`;
DROP TABLE IF EXISTS `users`;

CREATE TABLE `users` (
  `id` int(11) NOT NULL,
  setting_value varchar(20) DEFAULT NULL
);
LOCK TABLES `users` WRITE;
INSERT INTO `users` VALUES (1,'a');
UNLOCK TABLES;
"""


def _statements(text):
    return [s.strip() for s in text.split(";") if s.strip()]


class TestClean:
    """Tests for removing non-semantic lines."""

    def test_removes_noise_lines(self):
        cleaned = clean(RAW_DUMP)
        assert "--" not in cleaned
        assert "/*!" not in cleaned
        assert "generated by hand" not in cleaned
        assert "DROP" not in cleaned
        assert "LOCK" not in cleaned
        assert "USE" not in cleaned
        assert "\n\n" not in cleaned

    def test_keeps_statements_in_order(self):
        cleaned = clean(RAW_DUMP)
        assert cleaned.index("CREATE TABLE") < cleaned.index("INSERT INTO")

    def test_keyword_prefix_inside_identifier_kept(self):
        """A column called setting_value is not a SET statement."""
        assert "setting_value varchar(20)" in clean(RAW_DUMP)

    def test_idempotent(self):
        once = clean(RAW_DUMP)
        assert clean(once) == once


class TestSplitStatements:
    """Tests for the DDL / INSERT partition."""

    def test_partition_is_exhaustive_and_disjoint(self):
        cleaned = clean(RAW_DUMP)
        ddl_text, insert_text = split_statements(cleaned)
        ddl = _statements(ddl_text)
        inserts = _statements(insert_text)
        assert sorted(ddl + inserts) == sorted(_statements(cleaned))
        assert not set(ddl) & set(inserts)

    def test_inserts_and_ddl_separated(self):
        ddl_text, insert_text = split_statements(clean(RAW_DUMP))
        assert "CREATE TABLE" in ddl_text
        assert "INSERT" not in ddl_text
        assert insert_text.strip().startswith("INSERT INTO `users`")

    def test_sqlyog_style_insert(self):
        """A block comment before the INSERT and a double space are still an INSERT."""
        text = "/*Data for the table `t` */\n\ninsert  into `t`(`a`) values (1)"
        assert is_insert(text)
        _, insert_text = split_statements(text)
        assert "values (1)" in insert_text

    def test_empty_input(self):
        assert split_statements("") == ("", "")

    def test_insert_only_after_leading_comment(self):
        assert not is_insert("/* insert into t values (1) */ CREATE TABLE t (a int)")
