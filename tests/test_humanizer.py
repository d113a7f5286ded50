import pytest

from refwriter.core.random_source import SeededRandomSource, SequenceRandomSource
from refwriter.utils.humanizer import EnglishProcessor, Humanizer, humanize_text

SAMPLE_TEXT = (
    "The results are very good and the team is ready. It works well. We think it is fine.\n\n"
    "The second paragraph was quite short but it was clear. Everything else is really simple."
)


@pytest.mark.parametrize("text", [
    SAMPLE_TEXT,
    "",
    "It is very good and it was really quite clear, but or and.",
])
def test_zero_creativity_returns_input(text):
    for seed in range(10):
        assert humanize_text(text, creativity=0.0, seed=seed) == text


def test_full_creativity_always_changes_text():
    changed = sum(humanize_text(SAMPLE_TEXT, creativity=1.0, seed=seed) != SAMPLE_TEXT for seed in range(50))
    assert changed == 50


def test_output_never_shorter_than_input():
    for seed in range(30):
        for creativity in (0.2, 0.5, 0.9):
            output = humanize_text(SAMPLE_TEXT, creativity=creativity, seed=seed)
            assert len(output) >= len(SAMPLE_TEXT)


def test_same_seed_is_reproducible():
    first = humanize_text(SAMPLE_TEXT, creativity=0.8, seed=1234)
    second = humanize_text(SAMPLE_TEXT, creativity=0.8, seed=1234)
    assert first == second


def test_creativity_out_of_range_is_clamped():
    assert humanize_text(SAMPLE_TEXT, creativity=-1.0, seed=3) == SAMPLE_TEXT
    assert humanize_text(SAMPLE_TEXT, creativity=5.0, seed=3) == humanize_text(SAMPLE_TEXT, creativity=1.0, seed=3)


def test_add_variations_all_rules_fire():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0]))
    assert humanizer.add_variations("it is very good and fine") == "it is actually very quite good and, however fine"


def test_add_variations_no_rule_fires():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.99]))
    text = "it is very good and fine"
    assert humanizer.add_variations(text) == text


def test_add_variations_is_case_sensitive():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0]))
    assert humanizer.add_variations("Is Very And") == "Is Very And"


def test_add_variations_respects_word_boundaries():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0]))
    assert humanizer.add_variations("this island brand forest") == "this island brand forest"


def test_restructure_sentences_wraps_every_third():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0]))
    result = humanizer.restructure_sentences("One. Two. Three. Four", 1.0)
    assert result == "However, One. Two. Three. However, Four"
    assert humanizer.modifications_applied == 2


def test_restructure_paragraphs_fills_every_slot():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0]))
    result = humanizer.restructure_paragraphs("Alpha\n\nBeta\n\nGamma", 1.0)
    assert result == (
        "First, Alpha. Then, Alpha. Finally, Alpha.\n\n"
        "Beta\n\n"
        "First, Gamma. Then, Gamma. Finally, Gamma."
    )


def test_template_choice_follows_random_source():
    templates = EnglishProcessor().get_sentence_templates()
    # 0.5 * 20 -> indice 10
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0, 0.5]))
    result = humanizer.restructure_sentences("Only sentence", 1.0)
    assert result == templates[10].replace("{content}", "Only sentence")


def test_vary_pattern_match_rewrites_first_occurrence():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0]))
    fillers = EnglishProcessor().get_pattern_categories()["fillers"]
    result = humanizer.vary_pattern_match("it was very good, very good", fillers, "fillers")
    assert result == "it was very quite good, very good"
    assert humanizer.modifications_applied == 1


def test_vary_pattern_match_without_matches():
    source = SequenceRandomSource([0.0])
    humanizer = Humanizer(random_source=source)
    fillers = EnglishProcessor().get_pattern_categories()["fillers"]
    assert humanizer.vary_pattern_match("xyz", fillers) == "xyz"
    assert source.calls == 0


def test_full_humanize_with_fixed_randomness():
    humanizer = Humanizer(random_source=SequenceRandomSource([0.0]))
    result = humanizer.humanize("Plain words here", creativity=1.0)
    assert result == (
        "First, However, Plain words here. "
        "Then, However, Plain words here. "
        "Finally, However, Plain words here."
    )


def test_seeded_source_records_seed():
    assert SeededRandomSource(99).seed == 99
    assert isinstance(SeededRandomSource().seed, int)


def test_sequence_source_rejects_invalid_values():
    with pytest.raises(ValueError):
        SequenceRandomSource([])
    with pytest.raises(ValueError):
        SequenceRandomSource([1.0])
