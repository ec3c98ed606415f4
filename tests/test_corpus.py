"""Tests for locating family text in the corpus."""

from kalvian_roots.ingestion import CorpusFile, split_family_blocks


def test_extract_family_text(corpus):
    text = corpus.extract_family_text("KORPI 6")
    assert text.startswith("KORPI 6, pages 105-106")
    assert text.endswith("Lapsena kuollut 2")
    assert "KORPI 7" not in text


def test_extract_is_case_insensitive(corpus):
    assert corpus.extract_family_text("korvela 3") == corpus.extract_family_text("KORVELA 3")


def test_missing_family_returns_none(corpus):
    assert corpus.extract_family_text("KORPI 99") is None


def test_prefix_does_not_match_longer_number():
    corpus = CorpusFile("KORPI 10, page 1\nline\n\nKORPI 1, page 2\nother\n")
    assert corpus.extract_family_text("KORPI 1") == "KORPI 1, page 2\nother"


def test_find_next_family_id(corpus):
    assert corpus.find_next_family_id("KORPI 6") == "KORPI 7"
    assert corpus.find_next_family_id("korpi 7") == "KORVELA 3"
    assert corpus.find_next_family_id("RITA 9") is None
    assert corpus.find_next_family_id("NOWHERE 1") is None


def test_get_all_family_ids_skips_titles(corpus):
    assert corpus.get_all_family_ids() == [
        "HERLEVI 1",
        "HYYPPÄ 5",
        "KORPELA 2",
        "KORPI 5",
        "KORPI 6",
        "KORPI 7",
        "KORVELA 3",
        "RITA 9",
    ]


def test_roman_numeral_and_letter_headers():
    blocks = split_family_blocks(
        "KYKYRI II 9, page 264\ntext\n\nHyyppä 5A page 12\ntext\n\nISO-PEITSO III 2\ntext"
    )
    assert [block.family_id for block in blocks] == ["KYKYRI II 9", "HYYPPÄ 5A", "ISO-PEITSO III 2"]
    assert blocks[1].line_number == 4
    assert blocks[0].to_dict()["text"] == "KYKYRI II 9, page 264\ntext"


def test_from_path(tmp_path):
    path = tmp_path / "corpus.txt"
    path.write_text("RITA 9, page 410\n★ 1725 Antti Antinp.\n", encoding="utf-8")
    corpus = CorpusFile.from_path(path)
    assert corpus.source == path
    assert corpus.get_all_family_ids() == ["RITA 9"]
