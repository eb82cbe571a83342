from types import SimpleNamespace

from hrcore.assistant import APOLOGY_MESSAGE, SYSTEM_INSTRUCTION, ask_assistant, build_contents
from hrcore.config import Settings
from hrcore.seed import seed_snapshot


class FakeCompletions:
    def __init__(self, answer=None, error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.answer)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


SETTINGS = Settings(llm_api_key="test", llm_model="test-model", llm_temperature=0.2, llm_top_p=0.9)


def test_contents_embed_both_collections_and_question():
    contents = build_contents("¿Quién ingresó primero?", seed_snapshot())
    assert "### COLABORADORES ###" in contents
    assert "### REGISTROS ###" in contents
    assert "Ana García" in contents
    assert contents.endswith("PREGUNTA DEL USUARIO:\n¿Quién ingresó primero?")


def test_answer_is_returned():
    completions = FakeCompletions(answer="  Hay 4 colaboradores activos. ")
    answer = ask_assistant("¿Cuántos activos?", seed_snapshot(), client=_client(completions), settings=SETTINGS)
    assert answer == "Hay 4 colaboradores activos."

    [call] = completions.calls
    assert call["model"] == "test-model"
    assert call["temperature"] == 0.2
    assert call["top_p"] == 0.9
    assert call["messages"][0] == {"role": "system", "content": SYSTEM_INSTRUCTION}


def test_failures_return_apology(caplog):
    completions = FakeCompletions(error=RuntimeError("boom"))
    answer = ask_assistant("x", seed_snapshot(), client=_client(completions), settings=SETTINGS)
    assert answer == APOLOGY_MESSAGE
    assert "assistant request failed" in caplog.text


def test_empty_answer_and_missing_key_return_apology():
    empty = FakeCompletions(answer="")
    assert ask_assistant("x", seed_snapshot(), client=_client(empty), settings=SETTINGS) == APOLOGY_MESSAGE
    assert ask_assistant("x", seed_snapshot(), settings=Settings()) == APOLOGY_MESSAGE
