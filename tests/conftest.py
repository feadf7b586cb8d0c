import pytest

from study_notes_assistant.notes import StudyNote


@pytest.fixture()
def photosynthesis_note():
    return StudyNote(
        id="p1",
        title="Photosynthesis Basics",
        subject="Biology",
        body="Plants convert light into energy. Photosynthesis occurs in chloroplasts.",
        description="",
    )


@pytest.fixture()
def sample_notes(photosynthesis_note):
    return [
        photosynthesis_note,
        StudyNote(
            id="o1",
            title="Osmosis",
            subject="Biology",
            body="Osmosis moves water across a membrane.\nWater flows toward higher solute concentration.",
        ),
        StudyNote(
            id="m1",
            title="Mitosis and Meiosis",
            subject="Genetics",
            body="Mitosis produces two identical cells.\nMeiosis produces four gametes.",
        ),
        StudyNote(
            id="d1",
            title="Derivatives",
            subject="Calculus",
            body="",
            description="Slides on the chain rule and product rule",
        ),
    ]
