from __future__ import annotations

from conftest import SAMPLE_TABLE

from voron_mods.config import MOD_BASE_URL, SUPPORTED, UNSUPPORTED
from voron_mods.scrape.table import extract_link, parse_mods, split_cells


def test_parses_rows_of_first_table_only():
    drafts = parse_mods(SAMPLE_TABLE)
    assert [d.title for d in drafts] == ["Cool Mod", "Another", "External"]


def test_scenario_row():
    alice = parse_mods(SAMPLE_TABLE)[0]
    assert alice.creator == "Alice"
    assert alice.title == "Cool Mod"
    assert alice.link == f"{MOD_BASE_URL}/cool-mod"
    assert alice.source_path == "cool-mod"
    assert alice.last_changed == "2024-01-01"
    assert alice.compatibility.to_dict() == {
        "v0": UNSUPPORTED,
        "v0_1": UNSUPPORTED,
        "v1_8": UNSUPPORTED,
        "v2_4": SUPPORTED,
        "trident": SUPPORTED,
    }


def test_blank_creator_inherits_previous():
    another = parse_mods(SAMPLE_TABLE)[1]
    assert another.creator == "Alice"
    assert another.compatibility.v0 == SUPPORTED


def test_description_whitespace_collapsed():
    another = parse_mods(SAMPLE_TABLE)[1]
    assert another.description == "Second line here"


def test_short_row_dropped():
    assert "Broken" not in [d.title for d in parse_mods(SAMPLE_TABLE)]


def test_external_link_has_no_source_path():
    ext = parse_mods(SAMPLE_TABLE)[2]
    assert ext.creator == "Bob"
    assert ext.link == "https://example.com/ext"
    assert ext.source_path is None
    assert ext.last_changed is None
    assert ext.compatibility.v0 == SUPPORTED
    assert ext.compatibility.v0_1 == SUPPORTED
    assert ext.compatibility.v1_8 == SUPPORTED


def test_carry_forward_across_many_rows():
    md = "\n".join(
        [
            "| Creator | Mod | Description | Printer compatibility | Last Changed |",
            "| --- | --- | --- | --- | --- |",
            "| Zed | [A](zed/a) | a | V0 | 1 |",
            "| | [B](zed/b) | b | V0 | 2 |",
            "| | [C](zed/c) | c | V0 | 3 |",
            "| Yan | [D](yan/d) | d | V0 | 4 |",
            "| | [E](yan/e) | e | V0 | 5 |",
        ]
    )
    assert [d.creator for d in parse_mods(md)] == ["Zed", "Zed", "Zed", "Yan", "Yan"]


def test_blank_lines_inside_table_do_not_end_it():
    md = "\n".join(
        [
            "| Creator | Mod | Description | Printer compatibility | Last Changed |",
            "| --- | --- | --- | --- | --- |",
            "| Zed | [A](zed/a) | a | V0 | 1 |",
            "",
            "| Zed | [B](zed/b) | b | V0 | 2 |",
        ]
    )
    assert [d.title for d in parse_mods(md)] == ["A", "B"]


def test_no_table_or_empty_table():
    assert parse_mods("") == []
    assert parse_mods("# nothing here\n\njust prose") == []
    assert parse_mods("| Creator | Mod | Description | Compat | Last |\n| --- | --- |\n") == []


def test_extract_link_variants():
    assert extract_link("[Cool](./alice/cool)") == ("Cool", f"{MOD_BASE_URL}/alice/cool", "alice/cool")
    assert extract_link("[Ext](HTTPS://example.com/x)") == ("Ext", "HTTPS://example.com/x", None)
    assert extract_link("No link here") == ("No link here", MOD_BASE_URL, None)
    # empty target: no link pattern, whole cell is the title
    assert extract_link("[Title]()") == ("[Title]()", MOD_BASE_URL, None)


def test_split_cells_keeps_escaped_pipes():
    assert split_cells("| a | b \\| c | d |") == ["a", "b | c", "d"]
    assert split_cells("|  | x |") == ["", "x"]
