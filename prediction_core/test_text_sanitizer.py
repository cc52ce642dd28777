from prediction_core.text_sanitizer import scan_banned_language, scan_influence_labels, sanitize_text


def test_will_happen_softened_to_may_happen() -> None:
    out = sanitize_text("This will happen for sure")
    assert "may happen for sure" in out
    assert out == "This may happen for sure"


def test_sanitizing_clean_output_is_noop() -> None:
    once = sanitize_text("This will happen for sure")
    assert sanitize_text(once) == once


def test_only_first_banned_pattern_is_rewritten() -> None:
    # pattern order wins over position in the text
    assert sanitize_text("a disaster is certain") == "a disaster is may"
    assert sanitize_text("Guaranteed disaster") == "may disaster"


def test_first_occurrence_only() -> None:
    assert sanitize_text("fear and more fear") == "may and more fear"


def test_case_insensitive_and_percent() -> None:
    assert sanitize_text("DEFINITELY good") == "may good"
    assert sanitize_text("100% sure") == "may sure"


def test_partial_words_do_not_match() -> None:
    assert sanitize_text("uncertainty is fearless") == "uncertainty is fearless"


def test_whitespace_trimmed_and_non_strings_empty() -> None:
    assert sanitize_text("  steady pace  ") == "steady pace"
    assert sanitize_text(None) == ""
    assert sanitize_text(42) == ""


def test_influence_label_scanner() -> None:
    findings = scan_influence_labels("Saturn mahadasha brings pressure")
    assert {f["match"].lower() for f in findings} == {"saturn", "mahadasha"}
    assert scan_influence_labels("Pressure builds mid-week; support returns later.") == []


def test_banned_language_scanner_reports_every_match() -> None:
    findings = scan_banned_language("fear, then terrible news")
    assert len(findings) == 2
