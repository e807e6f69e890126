from wonderlens.inference.prompts import (
    CORE_IDENTITY,
    LENS_MENU,
    UNRECOGNIZED_MESSAGE,
    build_lens_prompt,
    build_news_prompt,
    build_quiz_prompt,
    join_prompt_parts,
)


def test_join_prompt_parts_skips_empty():
    assert join_prompt_parts(["a", None, "", "\n\n", "b\n"]) == "a\n\nb"


def test_lens_prompt_carries_child_context_and_rules():
    prompt = build_lens_prompt(7, "in")
    assert "child_age: 7" in prompt
    assert "child_country: in" in prompt
    assert "Write for a 7-year-old" in prompt
    assert f'ALWAYS include "{CORE_IDENTITY}"' in prompt
    assert "exactly **4 additional lenses** (total = 5)" in prompt
    for name, _ in LENS_MENU:
        assert name in prompt


def test_lens_prompt_contains_safety_gate_sentinel():
    prompt = build_lens_prompt(9, "us")
    assert "90 %" in prompt
    assert '"object": "unrecognized"' in prompt
    assert UNRECOGNIZED_MESSAGE in prompt


def test_lens_prompt_without_child_context():
    prompt = build_lens_prompt(None, None)
    assert "child_age: unknown" in prompt
    assert "child_country: unknown" in prompt


def test_news_prompt_word_limit_and_country():
    prompt = build_news_prompt("gb", "8-9", 40)
    assert 'CHILD_COUNTRY = "gb"' in prompt
    assert "<= 40 words" in prompt
    assert "Science Spark" in prompt and "Culture Pop" in prompt


def test_quiz_prompt_question_count():
    prompt = build_quiz_prompt("Math Puzzles", "10", 10)
    assert "Create 10 engaging multiple-choice questions" in prompt
    assert "about Math Puzzles" in prompt
    assert '"correct_answer"' in prompt
