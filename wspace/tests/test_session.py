import threading

from wspace.asm import assemble
from wspace.session import ExecutionSession, SessionConfig


def _session(answers=(), **kwargs):
    prompts = []
    outputs = []
    answers = list(answers)

    def request_input(prompt):
        prompts.append(prompt)
        return answers.pop(0)

    session = ExecutionSession(request_input=request_input, on_output=outputs.append, **kwargs)
    return session, prompts, outputs


def test_execute_hello(hello_source):
    session, prompts, outputs = _session()
    reply = session.execute(hello_source)
    assert reply == {"status": "ok", "execution_count": 1, "stdout": "Hello!"}
    assert prompts == []
    assert outputs == []


def test_state_carries_over_between_requests():
    session, _, _ = _session()
    first = session.execute(assemble("push 20\npush 22\n"))
    assert first["status"] == "ok"
    assert first["stdout"] == ""
    second = session.execute(assemble("add\nwnum\nend\n").decode("ascii"))
    assert second == {"status": "ok", "execution_count": 2, "stdout": "42"}
    # a terminated VM accepts the next request
    third = session.execute(assemble("push 7\nwnum\n"))
    assert third["stdout"] == "7"
    assert session.vm.stack == []


def test_load_error_reply():
    session, _, _ = _session()
    reply = session.execute(b"   \t\n\t \n")
    assert reply["status"] == "error"
    assert reply["ename"] == "InvalidCode"
    assert reply["stderr"] == "5: invalid sequence"
    assert reply["stdout"] == ""


def test_incomplete_source_is_an_error():
    session, _, _ = _session()
    reply = session.execute(b"  \t")
    assert reply["ename"] == "IncompleteCode"
    assert reply["stderr"] == "0: incomplete sequence"


def test_runtime_error_reply_keeps_partial_output():
    session, _, _ = _session()
    reply = session.execute(assemble("push 'x'\nwchar\ndup\nend\n"))
    assert reply == {
        "status": "error",
        "execution_count": 1,
        "stdout": "x",
        "stderr": "15: Dup: not enough stack to do",
        "ename": "NotEnoughStack",
    }
    assert session.execute(assemble("push 1\nwnum\n"))["status"] == "ok"


def test_input_is_requested_per_line_and_output_flushed_first():
    session, prompts, outputs = _session(["41", "z"])
    source = """
        push '?'
        wchar
        push 0
        rnum
        push 1
        rchar
        push 0
        retrieve
        push 1
        add
        wnum
        push 1
        retrieve
        wchar
        end
    """
    reply = session.execute(assemble(source))
    assert reply["status"] == "ok"
    assert reply["stdout"] == "42z"
    assert prompts == [">", ">"]
    assert outputs == ["?"]


def test_input_prompt_is_configurable():
    session, prompts, _ = _session(["5"], config=SessionConfig(input_prompt="in: "))
    session.execute(assemble("push 0\nrnum\n"))
    assert prompts == ["in: "]
    assert session.vm.heap == {0: 5}


def test_bad_number_input():
    session, _, _ = _session(["five"])
    reply = session.execute(assemble("push 0\nrnum\n"))
    assert reply["ename"] == "ValueError"
    assert reply["stderr"].startswith("4: ReadNum: expected integer")


def test_cancelled_request():
    session, _, _ = _session()
    cancel = threading.Event()
    cancel.set()
    reply = session.execute(assemble("push 1\nwnum\nend\n"), cancel)
    assert reply["ename"] == "Cancelled"
    assert reply["stderr"] == "0: Push: context done"
    assert session.execute(assemble("end\n"))["status"] == "ok"


def test_output_between_reads_of_one_line_is_not_flushed_early():
    session, prompts, outputs = _session(["ab"])
    source = """
        push 0
        rchar
        push 'x'
        wchar
        push 1
        rchar
        end
    """
    reply = session.execute(assemble(source))
    assert prompts == [">"]
    assert outputs == []
    assert reply["stdout"] == "x"
    assert session.vm.heap == {0: ord("a"), 1: ord("b")}
