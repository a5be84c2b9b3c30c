"""
Tests for the Run lifecycle.

Covers input validation at creation, request resolution, and the
forward-only status machine.
"""

import pytest

from tooldeck.domain import run as run_lifecycle
from tooldeck.domain.errors import ErrorKind
from tooldeck.domain.events import RunCreated, RunStatusChanged
from tooldeck.domain.inputs import Input, InputType
from tooldeck.domain.run import RunInputValue
from tooldeck.domain.values import RunStatus


@pytest.fixture
def get_user(make_app, id_input):
    """GET /users/{id} with one required integer input and one optional."""
    verbose = Input.create("verbose", InputType.boolean(), default_value="false").unwrap()
    return make_app(
        inputs=[id_input, verbose],
        url_path="/users/{id}",
        url_parameters=[("verbose", "{verbose}")],
    ).unwrap().state


@pytest.fixture
def pending_run(get_user):
    return run_lifecycle.create(get_user, [RunInputValue("id", "42")]).unwrap()


def _finish(run, target):
    running = run_lifecycle.mark_as_running(run).unwrap()
    if target == RunStatus.SUCCESS:
        return run_lifecycle.mark_as_success(running, "ok").unwrap()
    if target == RunStatus.FAILURE:
        return run_lifecycle.mark_as_failure(running, "boom").unwrap()
    return run_lifecycle.mark_as_invalid_configuration(running, "bad").unwrap()


# =============================================================================
# Creation
# =============================================================================


class TestCreateRun:
    """Input values must match the App's Input schema."""

    def test_pending_run_with_created_event(self, get_user, pending_run):
        state = pending_run.state

        assert state.status == RunStatus.PENDING
        assert state.app_id == get_user.id
        assert state.input_values == (RunInputValue("id", "42"),)
        assert state.executable_request is None
        assert state.created_at is not None

        (event,) = pending_run.get_uncommitted_events()
        assert isinstance(event, RunCreated)
        assert event.to_dict()["input_values"] == [{"title": "id", "value": "42"}]

    def test_missing_required_input(self, make_app):
        email = Input.create("email", InputType.email(), required=True).unwrap()
        app = make_app(inputs=[email]).unwrap().state

        result = run_lifecycle.create(app, [])

        assert result.error.kind == ErrorKind.VALIDATION_ERROR
        assert result.error.message == "Missing required inputs: email"

    def test_undeclared_input(self, make_app):
        x = Input.create("x", InputType.text(10).unwrap()).unwrap()
        app = make_app(inputs=[x]).unwrap().state

        result = run_lifecycle.create(app, [RunInputValue("y", "1")])

        assert result.error.kind == ErrorKind.VALIDATION_ERROR
        assert result.error.message == "Invalid inputs not defined in app: y"

    def test_missing_reported_before_undeclared(self, get_user):
        result = run_lifecycle.create(get_user, [("nope", "1")])

        assert result.error.message == "Missing required inputs: id"

    def test_optional_input_may_be_omitted(self, get_user):
        assert run_lifecycle.create(get_user, {"id": "1"}).is_ok

    def test_duplicate_titles_rejected(self, get_user):
        result = run_lifecycle.create(get_user, [("id", "1"), ("id", "2")])

        assert result.error.message == "Duplicate input values: id"

    def test_accepts_title_value_dicts(self, get_user):
        run = run_lifecycle.create(
            get_user,
            [{"title": "id", "value": "42"}, {"title": "verbose", "value": "true"}],
        ).unwrap()

        assert run.state.input_values == (
            RunInputValue("id", "42"),
            RunInputValue("verbose", "true"),
        )

    def test_accepts_list_pairs(self, get_user):
        run = run_lifecycle.create(get_user, [["id", "42"]]).unwrap()

        assert run.state.input_mapping == {"id": "42"}

    def test_unsupported_item_shape(self, get_user):
        with pytest.raises(TypeError):
            run_lifecycle.create(get_user, ["id=42"])

    def test_types_not_checked_by_default(self, get_user):
        assert run_lifecycle.create(get_user, {"id": "forty-two"}).is_ok

    def test_types_checked_when_requested(self, get_user):
        result = run_lifecycle.create(get_user, {"id": "forty-two"}, validate_types=True)

        assert result.error.kind == ErrorKind.VALIDATION_ERROR
        assert result.error.message.startswith("Invalid value for input 'id'")

        assert run_lifecycle.create(get_user, {"id": "42"}, validate_types=True).is_ok


# =============================================================================
# Request resolution
# =============================================================================


class TestComposeRequest:
    """compose_executable_request_from_app_and_resource."""

    def test_base_url_resolved_from_input(self, make_app, http_resource, id_input):
        app = make_app(inputs=[id_input], url_path="/users/{id}").unwrap().state
        run = run_lifecycle.create(app, [RunInputValue("id", "42")]).unwrap()

        composed = run_lifecycle.compose_executable_request_from_app_and_resource(
            run, app, http_resource.state
        ).unwrap()

        assert composed.state.executable_request.base_url == (
            "https://api.example.com/v1/users/42"
        )

    def test_unsupplied_optional_placeholder_left_verbatim(
        self, get_user, pending_run, http_resource
    ):
        composed = run_lifecycle.compose_executable_request_from_app_and_resource(
            pending_run, get_user, http_resource.state
        ).unwrap()

        assert composed.state.executable_request.url_parameters == (
            ("token", "abc"),
            ("verbose", "{verbose}"),
        )

    def test_no_status_change_and_no_event(self, get_user, pending_run, http_resource):
        committed = pending_run.mark_committed()

        composed = run_lifecycle.compose_executable_request_from_app_and_resource(
            committed, get_user, http_resource.state
        ).unwrap()

        assert composed.state.status == RunStatus.PENDING
        assert composed.get_uncommitted_events() == ()

    def test_sql_resource(self, get_user, pending_run, sql_resource):
        result = run_lifecycle.compose_executable_request_from_app_and_resource(
            pending_run, get_user, sql_resource.state
        )

        assert result.error.kind == ErrorKind.INVALID_OPERATION

    def test_terminal_run_cannot_be_recomposed(self, get_user, pending_run, http_resource):
        finished = _finish(pending_run, RunStatus.FAILURE)

        result = run_lifecycle.compose_executable_request_from_app_and_resource(
            finished, get_user, http_resource.state
        )

        assert result.error.kind == ErrorKind.INVALID_OPERATION


# =============================================================================
# Status transitions
# =============================================================================


class TestTransitions:
    """Forward-only status machine."""

    def test_happy_path(self, pending_run):
        running = run_lifecycle.mark_as_running(pending_run).unwrap()
        assert running.state.status == RunStatus.RUNNING
        assert running.state.started_at is not None

        done = run_lifecycle.mark_as_success(running, '{"id": 42}').unwrap()
        assert done.state.status == RunStatus.SUCCESS
        assert done.state.response == '{"id": 42}'
        assert done.state.completed_at >= done.state.started_at

        changes = [
            (event.old_status, event.new_status)
            for event in done.get_uncommitted_events()
            if isinstance(event, RunStatusChanged)
        ]
        assert changes == [
            (RunStatus.PENDING, RunStatus.RUNNING),
            (RunStatus.RUNNING, RunStatus.SUCCESS),
        ]

    def test_failure_records_message(self, pending_run):
        running = run_lifecycle.mark_as_running(pending_run).unwrap()

        failed = run_lifecycle.mark_as_failure(running, "HTTP 500").unwrap()

        assert failed.state.status == RunStatus.FAILURE
        assert failed.state.error_message == "HTTP 500"
        assert failed.state.completed_at is not None

    def test_invalid_configuration_straight_from_pending(self, pending_run):
        result = run_lifecycle.mark_as_invalid_configuration(pending_run, "no resource")

        assert result.value.state.status == RunStatus.INVALID_CONFIGURATION
        assert result.value.state.started_at is None
        event = result.value.get_uncommitted_events()[-1]
        assert event.to_dict()["new_status"] == "invalid_configuration"

    def test_success_requires_running(self, pending_run):
        result = run_lifecycle.mark_as_success(pending_run, "ok")

        assert result.error.kind == ErrorKind.INVALID_OPERATION
        assert result.error.message == "Cannot transition run from Pending to Success"

    @pytest.mark.parametrize(
        "terminal",
        [RunStatus.SUCCESS, RunStatus.FAILURE, RunStatus.INVALID_CONFIGURATION],
    )
    def test_terminal_states_accept_nothing(self, pending_run, terminal):
        finished = _finish(pending_run, terminal)

        attempts = [
            run_lifecycle.mark_as_running(finished),
            run_lifecycle.mark_as_success(finished, "again"),
            run_lifecycle.mark_as_failure(finished, "again"),
            run_lifecycle.mark_as_invalid_configuration(finished, "again"),
        ]

        for attempt in attempts:
            assert attempt.error.kind == ErrorKind.INVALID_OPERATION
        # The rejected attempts left the run untouched
        assert finished.state.status == terminal

    def test_running_twice_is_rejected(self, pending_run):
        running = run_lifecycle.mark_as_running(pending_run).unwrap()

        assert run_lifecycle.mark_as_running(running).is_error
