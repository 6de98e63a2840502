from mindmapx.suggestions import SUGGESTIONS, generate_suggestions


def test_known_label():
    assert generate_suggestions("Feature 1") == ["Drag & Drop", "Real-time Updates", "Export Options"]


def test_unknown_label_falls_back():
    assert generate_suggestions("Unseen Label") == ["New Idea", "Related Concept", "Example", "Sub-category"]


def test_repeatable_and_not_shared():
    first = generate_suggestions("Central Idea")
    first.append("mutated")
    assert generate_suggestions("Central Idea") == [
        "Feature 1", "User Benefits", "Technical Stack", "Business Model"]


def test_never_more_than_four():
    for label in list(SUGGESTIONS) + ["", "anything"]:
        assert 1 <= len(generate_suggestions(label)) <= 4
