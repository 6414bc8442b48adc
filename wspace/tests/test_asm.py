import pytest

from wspace.asm import assemble, encode_label, encode_number, main
from wspace.opcodes import Command
from wspace.vm import VM


@pytest.mark.parametrize(
    "value, expect",
    [(0, " \n"), (1, " \t\n"), (-1, "\t\t\n"), (6, " \t\t \n"), (-72, "\t\t  \t   \n")],
)
def test_encode_number(value, expect):
    assert encode_number(value) == expect


def test_encode_label_is_unique():
    labels = {encode_label(i) for i in range(64)}
    assert len(labels) == 64
    assert encode_label(0) == "\t"
    with pytest.raises(ValueError):
        encode_label(-1)


def test_assemble_matches_handwritten_hello(hello_source):
    source = """
        ; Hello! with the double l from a dup
        push 72
        wchar
        push 'e'     # comment
        printc
        push 0x6c
        dup
        wchar
        wchar
        push 111
        wchar
        push '!'
        wchar
        end
    """
    assert assemble(source) == hello_source


def test_assemble_labels_and_mark_mnemonic():
    code = assemble(["start:", "jmp start", "mark other", "call other"])
    vm = VM()
    vm.load(code)
    assert [ins.command for ins in vm.program] == [Command.Mark, Command.Jump, Command.Mark, Command.Call]
    assert vm.program[0].label == "\t"
    assert vm.program[2].label == "\t "
    assert vm.labels.to_dict() == {"\t": 1, "\t ": 3}


def test_assemble_char_literals_with_comment_markers():
    vm = VM()
    vm.load(assemble("push ';'\npush '#'  ; two\npush '\\n'\n"))
    assert [ins.parameter for ins in vm.program] == [ord(";"), ord("#"), 10]


@pytest.mark.parametrize(
    "source, message",
    [
        ("a:\na:\n", "Duplicate label: a"),
        ("frob\n", "line 1: unknown mnemonic 'frob'"),
        ("\nadd 1\n", "line 2: add takes no operand"),
        ("push\n", "line 1: push requires an operand"),
        ("push ten\n", "Invalid number: ten"),
    ],
)
def test_assemble_errors(source, message):
    with pytest.raises(ValueError) as info:
        assemble(source)
    assert str(info.value) == message


def test_main_writes_output_file(tmp_path):
    src = tmp_path / "prog.wsa"
    src.write_text("push 1\nwnum\nend\n", encoding="utf-8")
    dest = tmp_path / "prog.ws"
    assert main([str(src), "-o", str(dest)]) == 0
    assert dest.read_bytes() == b"   \t\n\t\n \t\n\n\n"


def test_main_reports_errors(tmp_path, capsys):
    src = tmp_path / "bad.wsa"
    src.write_text("nope\n", encoding="utf-8")
    assert main([str(src)]) == 1
    assert "unknown mnemonic" in capsys.readouterr().err


def test_comment_after_char_literal_marker():
    vm = VM()
    vm.load(assemble("push ';' ; semicolon\npush '#' # hash\n"))
    assert [ins.parameter for ins in vm.program] == [ord(";"), ord("#")]
