import math

from drug_label_explorer.models.responses import TextChunk
from drug_label_explorer.rag.scoring import rank_and_pick_top, score_chunk


def _chunk(text: str, chunk_id: str = "c") -> TextChunk:
    return TextChunk(id=chunk_id, text=text, source="src")


def test_keyword_hits_are_weighted_by_length_and_normalized():
    chunk = _chunk("aspirin causes bleeding")

    score = score_chunk(chunk, "aspirin bleeding")

    expected = (math.log(1 + 7) + math.log(1 + 8)) / math.sqrt(len("aspirin causes bleeding"))
    assert math.isclose(score, expected)


def test_exact_phrase_gets_bonus():
    chunk = _chunk("Aspirin bleeding")

    score = score_chunk(chunk, "aspirin bleeding")

    expected = (math.log(8) + math.log(9) + len("aspirin bleeding") * 2) / math.sqrt(16)
    assert math.isclose(score, expected)


def test_repeated_keyword_counts_every_occurrence():
    once = score_chunk(_chunk("rash xxxx xxxx"), "", extra_keywords=["rash"])
    twice = score_chunk(_chunk("rash rash xxxx"), "", extra_keywords=["rash"])

    assert math.isclose(twice, 2 * once)


def test_short_words_are_not_keywords():
    assert score_chunk(_chunk("an of at"), "of an", extra_keywords=["to"]) == 0.0


def test_extra_keywords_add_to_score():
    chunk = _chunk("Boxed warning for hepatotoxicity")

    plain = score_chunk(chunk, "liver")
    boosted = score_chunk(chunk, "liver", extra_keywords=["boxed warning"])

    assert plain == 0.0
    assert boosted > 0.0


def test_empty_text_scores_zero():
    assert score_chunk(_chunk(""), "anything") == 0.0


def test_rank_returns_scored_copies_best_first():
    chunks = [
        _chunk("unrelated dosage text", "a"),
        _chunk("hepatotoxicity hepatotoxicity", "b"),
        _chunk("mild hepatotoxicity noted in a long paragraph of text", "c"),
    ]

    top = rank_and_pick_top(chunks, "hepatotoxicity", top_k=2)

    assert [c.id for c in top] == ["b", "c"]
    assert top[0].score >= top[1].score
    assert all(c.score is None for c in chunks)


def test_ties_keep_input_order():
    chunks = [_chunk("same text", "first"), _chunk("same text", "second"), _chunk("same text", "third")]

    top = rank_and_pick_top(chunks, "nothing", top_k=3)

    assert [c.id for c in top] == ["first", "second", "third"]
    assert all(c.score == 0.0 for c in top)


def test_top_k_bounds():
    chunks = [_chunk("text one", "a"), _chunk("text two", "b")]

    assert rank_and_pick_top(chunks, "text", top_k=0) == []
    assert rank_and_pick_top([], "text", top_k=5) == []
    assert len(rank_and_pick_top(chunks, "text", top_k=10)) == 2


def test_repeated_term_outranks_unrelated_chunk():
    chunks = [_chunk("warning warning", "first"), _chunk("unrelated", "second")]

    top = rank_and_pick_top(chunks, "warning", top_k=1)

    assert [c.id for c in top] == ["first"]
    assert top[0].score > 0
