from __future__ import annotations

from datetime import date

import pytest
import requests

from conftest import make_response
from src.dashboard.submission import SubmissionController, UIState, classify_failure
from src.data.api_client import ReturnsApiClient
from src.models.submission import (
    RATE_LIMITED_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
    ErrorKind,
    Failed,
    Idle,
    Pending,
    Succeeded,
)


@pytest.fixture
def controller(settings, session, clock, valid_form) -> SubmissionController:
    client = ReturnsApiClient(settings, session=session)
    state = UIState(form=dict(valid_form))
    return SubmissionController(client, state=state, clear_after_seconds=10.0, clock=clock)


def test_submit_success_without_series_hides_chart_even_if_toggled_later(controller, session, result_payload) -> None:
    session.enqueue(make_response(200, result_payload))
    status = controller.submit()

    assert isinstance(status, Succeeded)
    result = controller.result
    assert result.scheme_name == result_payload['scheme_name']
    assert result.total_investment == 180000.0
    assert result.number_of_installments == 36
    assert result.lowest_nav == 301.02
    assert result.day_wise_series is None

    payload = session.calls[0]['json']
    assert payload == {
        'scheme_code': '100033',
        'start_date': '2020-01-01',
        'end_date': '2023-01-01',
        'amount': 5000.0,
        'frequency': 'monthly',
    }

    controller.set_graph_requested(True)
    assert controller.should_render_series() is False
    assert isinstance(controller.submission, Succeeded)


def test_graph_request_adds_series_flag_and_enables_chart(controller, session, result_payload, series_rows) -> None:
    controller.set_graph_requested(True)
    session.enqueue(make_response(200, {**result_payload, 'day_wise_data': series_rows}))
    controller.submit()

    assert session.calls[0]['json']['include_day_wise_data'] is True
    assert len(controller.result.day_wise_series) == 4
    assert controller.should_render_series() is True

    # Unticking the box afterwards does not affect the displayed result.
    controller.set_graph_requested(False)
    assert controller.should_render_series() is True


def test_empty_series_is_treated_as_no_chart(controller, session, result_payload) -> None:
    controller.set_graph_requested(True)
    session.enqueue(make_response(200, {**result_payload, 'day_wise_data': []}))
    controller.submit()
    assert isinstance(controller.submission, Succeeded)
    assert controller.should_render_series() is False


def test_submit_while_pending_does_not_reach_network(controller, session, result_payload) -> None:
    request = controller.begin_submit()
    assert request is not None
    assert isinstance(controller.submission, Pending)

    assert controller.begin_submit() is None
    status = controller.submit()
    assert isinstance(status, Pending)
    assert session.calls == []

    session.enqueue(make_response(200, result_payload))
    controller.complete_pending()
    assert len(session.calls) == 1
    assert isinstance(controller.submission, Succeeded)


@pytest.mark.parametrize('amount', ['', '0', '-5', 'abc', 'inf', 'nan'])
def test_invalid_amount_blocks_submission(controller, session, amount) -> None:
    controller.update_field('amount', amount)
    status = controller.submit()
    assert isinstance(status, Idle)
    assert controller.state.validation_errors
    assert session.calls == []


def test_end_before_start_blocks_submission(controller, session) -> None:
    controller.update_field('end_date', date(2019, 12, 31))
    controller.submit()
    assert isinstance(controller.submission, Idle)
    assert any('End date' in msg for msg in controller.state.validation_errors)
    assert session.calls == []


def test_edit_after_success_hides_result(controller, session, result_payload) -> None:
    session.enqueue(make_response(200, result_payload))
    controller.submit()
    assert controller.result is not None

    controller.update_field('frequency', 'yearly')
    assert isinstance(controller.submission, Idle)
    assert controller.result is None
    assert controller.state.form['frequency'] == 'yearly'


def test_edit_after_failure_hides_error_and_drops_timer(controller, session) -> None:
    session.enqueue(make_response(429))
    controller.submit()
    assert controller.timer is not None

    controller.update_field('amount', '6000')
    assert isinstance(controller.submission, Idle)
    assert controller.error is None
    assert controller.timer is None


def test_edit_while_pending_keeps_request_in_flight(controller, session, result_payload) -> None:
    controller.begin_submit()
    controller.update_field('amount', '7000')
    assert isinstance(controller.submission, Pending)

    session.enqueue(make_response(200, result_payload))
    controller.complete_pending()
    assert isinstance(controller.submission, Succeeded)
    assert controller.submission.request.amount == 5000.0


def test_unknown_field_is_rejected(controller) -> None:
    with pytest.raises(KeyError):
        controller.update_field('nav', '1')


def test_rate_limited_error_clears_after_delay(controller, session, clock) -> None:
    session.enqueue(make_response(429))
    controller.submit()

    error = controller.error
    assert error.kind is ErrorKind.RATE_LIMITED
    assert error.message == RATE_LIMITED_MESSAGE
    assert controller.seconds_until_clear() == 10.0

    clock.advance(9.5)
    assert controller.poll_timers() is False
    assert controller.error is not None

    clock.advance(0.5)
    assert controller.poll_timers() is True
    assert isinstance(controller.submission, Idle)
    assert controller.timer is None


def test_rejected_error_uses_detail_verbatim_and_stays(controller, session, clock) -> None:
    session.enqueue(make_response(404, {'detail': 'Scheme code 999999 not found'}))
    controller.submit()

    assert controller.error.kind is ErrorKind.REJECTED
    assert controller.error.message == 'Scheme code 999999 not found'
    assert controller.timer is None
    clock.advance(3600)
    assert controller.poll_timers() is False
    assert isinstance(controller.submission, Failed)


def test_rejected_error_reads_error_field(controller, session) -> None:
    session.enqueue(make_response(400, {'error': 'Start date is before scheme inception'}))
    controller.submit()
    assert controller.error.kind is ErrorKind.REJECTED
    assert controller.error.message == 'Start date is before scheme inception'


@pytest.mark.parametrize(
    'failure',
    [
        make_response(500),
        make_response(502, raw=b'<html>Bad Gateway</html>'),
        requests.ConnectionError('connection refused'),
        requests.Timeout('read timed out'),
        make_response(200, raw=b'not-json'),
        make_response(200, {'scheme_name': 'Partial'}),
    ],
)
def test_other_failures_are_unknown(controller, session, failure) -> None:
    session.enqueue(failure)
    controller.submit()
    assert controller.error.kind is ErrorKind.UNKNOWN
    assert controller.error.message == UNKNOWN_ERROR_MESSAGE
    assert controller.timer is None


def test_new_submission_clears_previous_error_before_outcome(controller, session) -> None:
    session.enqueue(make_response(400, {'detail': 'bad'}))
    controller.submit()
    assert controller.error is not None

    controller.begin_submit()
    assert controller.error is None
    assert isinstance(controller.submission, Pending)


def test_newer_rate_limit_replaces_older_timer(controller, session, clock) -> None:
    session.enqueue(make_response(429))
    controller.submit()
    first_deadline = controller.timer.deadline

    clock.advance(5)
    session.enqueue(make_response(429))
    controller.submit()
    assert controller.timer.deadline == first_deadline + 5

    clock.advance(6)
    assert controller.poll_timers() is False
    assert controller.error is not None

    clock.advance(4)
    assert controller.poll_timers() is True
    assert controller.error is None


def test_success_cancels_pending_clear_timer(controller, session, clock, result_payload) -> None:
    session.enqueue(make_response(429))
    controller.submit()
    assert controller.timer is not None

    session.enqueue(make_response(200, result_payload))
    controller.submit()
    assert controller.timer is None

    clock.advance(60)
    assert controller.poll_timers() is False
    assert isinstance(controller.submission, Succeeded)


def test_consecutive_submissions_show_latest_response(controller, session, result_payload) -> None:
    session.enqueue(make_response(200, result_payload))
    controller.submit()

    controller.update_field('amount', '10000')
    second = {**result_payload, 'total_investment': 360000.0}
    session.enqueue(make_response(200, second))
    controller.submit()

    assert controller.result.total_investment == 360000.0
    assert controller.submission.request.amount == 10000.0
    assert [call['json']['amount'] for call in session.calls] == [5000.0, 10000.0]


def test_classify_failure_joins_validation_detail_list() -> None:
    response = make_response(
        422,
        {'detail': [{'loc': ['body', 'amount'], 'msg': 'value is not a valid float'}, {'msg': 'field required'}]},
    )
    exc = requests.HTTPError('422', response=response)
    error = classify_failure(exc)
    assert error.kind is ErrorKind.REJECTED
    assert error.message == 'value is not a valid float; field required'


def test_classify_failure_rate_limit_ignores_body() -> None:
    response = make_response(429, {'detail': 'slow down'})
    error = classify_failure(requests.HTTPError('429', response=response))
    assert error.kind is ErrorKind.RATE_LIMITED
    assert error.auto_clears is True
