"""Write-side constraints on VideoAbuseRow."""
from __future__ import annotations

import pytest

from src.db.abuse_tables import VideoAbuseRow
from src.errors import VideoAbuseValidationError
from src.models.abuse import REASON_MAX_LENGTH, VideoAbuseState


def test_valid_abuse():
    abuse = VideoAbuseRow(reason="ok", state=VideoAbuseState.PENDING, moderation_comment=None)
    assert abuse.state == 1
    assert type(abuse.state) is int


@pytest.mark.parametrize("reason", ["", "x", "y" * (REASON_MAX_LENGTH + 1), None, 42])
def test_reason_is_rejected(reason):
    with pytest.raises(VideoAbuseValidationError) as exc:
        VideoAbuseRow(reason=reason, state=1)
    assert exc.value.field == "reason"
    assert exc.value.status_code == 422


def test_reason_upper_bound_is_inclusive():
    assert len(VideoAbuseRow(reason="y" * REASON_MAX_LENGTH, state=1).reason) == REASON_MAX_LENGTH


@pytest.mark.parametrize("state", [0, 4, -1, None, True, "1"])
def test_state_is_rejected(state):
    with pytest.raises(VideoAbuseValidationError) as exc:
        VideoAbuseRow(reason="spam", state=state)
    assert exc.value.field == "state"


@pytest.mark.parametrize("comment", ["", "x", "z" * 3001])
def test_moderation_comment_is_rejected(comment):
    with pytest.raises(VideoAbuseValidationError):
        VideoAbuseRow(reason="spam", state=1, moderation_comment=comment)


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        VideoAbuseRow(reason="spam", state=9)


def test_state_change_is_validated():
    abuse = VideoAbuseRow(reason="spam", state=1)
    abuse.state = VideoAbuseState.ACCEPTED
    assert abuse.state == 3
    with pytest.raises(VideoAbuseValidationError):
        abuse.state = 7
