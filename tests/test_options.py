import pytest

from chessinfra.options import MAX_THREADS, Options, OptionType


def test_defaults():
    opts = Options()
    assert opts.value("Hash") == 16
    assert opts.value("Threads") == 1
    assert opts.value("Syzygy50MoveRule") == 1
    assert opts.string_value("PersistentTTFileName") == "tt.ptt"
    assert opts.string_value("SyzygyPath") == "<empty>"
    assert opts.default_string("BookFile") == "<empty>"


def test_set_spin_case_insensitive():
    opts = Options()
    assert opts.set_by_name("hash", "64")
    assert opts.value("Hash") == 64


def test_spin_out_of_range_ignored():
    opts = Options()
    assert opts.set_by_name("Threads", str(MAX_THREADS + 1))
    assert opts.value("Threads") == 1
    assert opts.set_by_name("Threads", "0")
    assert opts.value("Threads") == 1


def test_spin_parses_leading_integer():
    opts = Options()
    opts.set_by_name("MultiPV", "12abc")
    assert opts.value("MultiPV") == 12


def test_check_values():
    opts = Options()
    assert opts.set_by_name("Ponder", "true")
    assert opts.value("Ponder") == 1
    assert opts.set_by_name("Ponder", "maybe")
    assert opts.value("Ponder") == 1
    opts.set_by_name("Ponder", "false")
    assert opts.value("Ponder") == 0


def test_string_value():
    opts = Options()
    opts.set_by_name("SyzygyPath", "/tb/a:/tb/b")
    assert opts.string_value("SyzygyPath") == "/tb/a:/tb/b"


def test_unknown_and_disabled():
    opts = Options()
    assert opts.set_by_name("No Such Thing", "1") is False
    assert opts.set_by_name("Skill Level", "5") is False
    assert opts.set_by_name("NUMA", "0") is False


def test_callback_invoked():
    opts = Options()
    seen = []
    opts.on_change("Hash", lambda opt: seen.append(opt.value))
    opts.set_by_name("Hash", "32")
    opts.set_value("Hash", 8)
    assert seen == [32, 8]


def test_callback_not_invoked_on_invalid_check():
    opts = Options()
    seen = []
    opts.on_change("Ponder", lambda opt: seen.append(opt.value))
    opts.set_by_name("Ponder", "yes")
    assert seen == []


def test_button_fires_callback():
    opts = Options()
    seen = []
    opts.on_change("Clear Hash", lambda opt: seen.append(opt.name))
    assert opts.set_by_name("clear hash", "")
    assert seen == ["Clear Hash"]


def test_on_change_unknown_option():
    with pytest.raises(KeyError):
        Options().on_change("missing", lambda opt: None)


def test_value_unknown_option():
    with pytest.raises(KeyError):
        Options().value("missing")


def test_format_options():
    text = Options().format_options()
    lines = text.splitlines()
    assert f"option name Threads type spin default 1 min 1 max {MAX_THREADS}" in lines
    assert "option name Clear Hash type button" in lines
    assert "option name Ponder type check default false" in lines
    assert "option name SyzygyPath type string default <empty>" in lines
    assert not any("Skill Level" in line for line in lines)
    assert not any("NUMA" in line for line in lines)
    assert text.endswith("\n")


def test_nnue_combo():
    opts = Options(nnue=True)
    assert opts["Use NNUE"].kind is OptionType.COMBO
    assert opts.string_value("Use NNUE") == "hybrid"
    opts.set_by_name("Use NNUE", "Classical")
    assert opts.string_value("Use NNUE") == "classical"
    assert "option name Use NNUE type combo default Hybrid var Hybrid var Pure var Classical" in (
        opts.format_options().splitlines()
    )


def test_nnue_absent_by_default():
    assert "Use NNUE" not in Options()
    assert "hash" in Options()