import asyncio

from a11y_audit import annotate
from a11y_audit.schema import AxeViolation


def _violation(rule_id, description, *targets):
    return AxeViolation(
        id=rule_id,
        description=description,
        nodes=[{"html": "<x>", "target": list(t)} for t in targets],
    )


VIOLATIONS = [
    _violation("image-alt", "Images must have alternate text", ["#logo"], ["#hero"]),
    _violation("button-name", "Buttons must have discernible text", ["#menu"]),
    _violation("image-alt", "Images must have alternate text", ["#footer-img"]),
    _violation("color-contrast", "Elements must meet contrast thresholds", ["#menu"], [["#widget-host", "#inner"]]),
]


def test_numbering_is_first_seen_and_contiguous():
    numbering = annotate.number_violations(VIOLATIONS)
    assert numbering == {"image-alt": 1, "button-name": 2, "color-contrast": 3}
    assert sorted(numbering.values()) == list(range(1, len(numbering) + 1))
    assert list(numbering) == ["image-alt", "button-name", "color-contrast"]


def test_numbering_ignores_severity_and_alphabet():
    vs = [_violation("z-rule", "z"), _violation("a-rule", "a")]
    vs[0].impact = "minor"
    vs[1].impact = "critical"
    assert annotate.number_violations(vs) == {"z-rule": 1, "a-rule": 2}
    assert annotate.number_violations([]) == {}


def test_legend_lines():
    numbering = annotate.number_violations(VIOLATIONS)
    assert annotate.legend_lines(VIOLATIONS, numbering) == [
        "1: image-alt - Images must have alternate text",
        "2: button-name - Buttons must have discernible text",
        "3: color-contrast - Elements must meet contrast thresholds",
    ]
    blank = [_violation("label", "")]
    assert annotate.legend_lines(blank, {"label": 1}) == ["1: label - No description available"]


def test_annotate_marks_first_rule_only_and_writes_artifacts(fake_browser, tmp_path):
    browser = fake_browser(elements={
        "#logo": ["logo"],
        "#hero": ["hero"],
        "#menu": ["menu"],
        "#footer-img": ["footer"],
    })
    page = asyncio.run(browser.new_page())
    shot = tmp_path / "site_highlight.jpg"
    legend = tmp_path / "site_legend.txt"

    numbering = asyncio.run(annotate.annotate(page, VIOLATIONS, shot, legend))

    # "#menu" is flagged by button-name and color-contrast; it keeps 2
    assert page.badges == {"logo": 1, "hero": 1, "menu": 2, "footer": 1}
    # nested shadow DOM targets are not passed to the page
    assert [c[0] for c in page.eval_calls] == ["#logo", "#hero", "#menu", "#footer-img", "#menu"]
    assert page.styles == [annotate.HIGHLIGHT_CSS]
    assert len(page.screenshots) == 1
    path, kwargs = page.screenshots[0]
    assert path == str(shot)
    assert kwargs == {"full_page": True, "type": "jpeg", "quality": 60}
    assert shot.exists()
    assert legend.read_text(encoding="utf-8").splitlines()[1] == "2: button-name - Buttons must have discernible text"
    assert numbering["color-contrast"] == 3


def test_reannotating_does_not_duplicate_badges(fake_browser):
    browser = fake_browser(elements={"#logo": ["logo"], "#menu": ["menu"]})
    page = asyncio.run(browser.new_page())
    numbering = annotate.number_violations(VIOLATIONS)
    first = asyncio.run(annotate.mark_violations(page, VIOLATIONS, numbering))
    second = asyncio.run(annotate.mark_violations(page, VIOLATIONS, numbering))
    assert first == 2
    assert second == 0
    assert page.badges == {"logo": 1, "menu": 2}


def test_unmatched_locator_is_skipped(fake_browser, tmp_path):
    browser = fake_browser(elements={})
    page = asyncio.run(browser.new_page())
    marked = asyncio.run(annotate.mark_violations(page, VIOLATIONS, annotate.number_violations(VIOLATIONS)))
    assert marked == 0
    assert page.badges == {}


def test_mark_script_guards_existing_badges():
    assert ":scope > .a11y-violation-number" in annotate.MARK_SCRIPT
    assert annotate.BADGE_CLASS in annotate.HIGHLIGHT_CSS
    assert annotate.HIGHLIGHT_CLASS in annotate.HIGHLIGHT_CSS
