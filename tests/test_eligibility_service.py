from sqlalchemy.exc import MultipleResultsFound, NoResultFound, OperationalError

from chat_relay.services.eligibility_service import (
    check_eligibility,
    find_notebook,
    has_completed_source,
    parse_notebook_id,
)
from factories import make_notebook, make_source, mock_storage


class TestParseNotebookId:
    def test_accepts_uuid_string(self, notebook_id):
        assert str(parse_notebook_id(notebook_id)) == notebook_id

    def test_rejects_malformed_id(self):
        assert parse_notebook_id("not-a-uuid") is None


class TestFindNotebook:
    def test_returns_single_match(self, notebook_id):
        notebook = make_notebook()
        db = mock_storage(notebook=notebook)

        found, error = find_notebook(db, notebook_id)

        assert found is notebook
        assert error is None

    def test_zero_matches_preserves_error(self, notebook_id):
        db = mock_storage(notebook_error=NoResultFound("No row was found when one was required"))

        found, error = find_notebook(db, notebook_id)

        assert found is None
        assert "No row was found" in error
        db.rollback.assert_called_once()

    def test_multiple_matches_reported_as_missing(self, notebook_id):
        db = mock_storage(notebook_error=MultipleResultsFound("Multiple rows were found"))

        found, error = find_notebook(db, notebook_id)

        assert found is None
        assert "Multiple rows" in error

    def test_storage_fault_reported_as_missing(self, notebook_id):
        db = mock_storage(notebook_error=OperationalError("SELECT", {}, Exception("connection refused")))

        found, error = find_notebook(db, notebook_id)

        assert found is None
        assert "connection refused" in error

    def test_malformed_id_skips_query(self):
        db = mock_storage()

        found, error = find_notebook(db, "abc")

        assert found is None
        assert "Invalid notebook id" in error
        db.query.assert_not_called()


class TestHasCompletedSource:
    def test_true_when_any_completed(self):
        sources = [make_source("pending"), make_source("completed")]
        assert has_completed_source(sources) is True

    def test_false_when_none_completed(self):
        sources = [make_source("pending"), make_source("processing"), make_source("failed")]
        assert has_completed_source(sources) is False

    def test_false_without_sources(self):
        assert has_completed_source([]) is False


class TestCheckEligibility:
    def test_eligible_notebook(self, notebook_id):
        db = mock_storage(notebook=make_notebook(), sources=[make_source("completed")])

        result = check_eligibility(db, notebook_id)

        assert result.exists is True
        assert result.has_completed_source is True
        assert result.error is None
        assert result.sources_unreadable is False

    def test_missing_notebook(self, notebook_id):
        db = mock_storage(notebook_error=NoResultFound("No row was found when one was required"))

        result = check_eligibility(db, notebook_id)

        assert result.exists is False
        assert result.has_completed_source is False
        assert result.error is not None

    def test_no_sources_is_confirmed_absence(self, notebook_id):
        db = mock_storage(notebook=make_notebook(), sources=[])

        result = check_eligibility(db, notebook_id)

        assert result.exists is True
        assert result.has_completed_source is False
        assert result.sources_unreadable is False

    def test_only_pending_sources(self, notebook_id):
        db = mock_storage(notebook=make_notebook(), sources=[make_source("pending"), make_source("processing")])

        result = check_eligibility(db, notebook_id)

        assert result.has_completed_source is False

    def test_sources_read_failure_is_distinguished(self, notebook_id):
        db = mock_storage(
            notebook=make_notebook(),
            sources_error=OperationalError("SELECT", {}, Exception("timeout")),
        )

        result = check_eligibility(db, notebook_id)

        assert result.exists is True
        assert result.has_completed_source is False
        assert result.sources_unreadable is True
        assert "timeout" in result.sources_error
        db.rollback.assert_called_once()

    def test_no_writes(self, notebook_id):
        db = mock_storage(notebook=make_notebook(), sources=[make_source()])

        check_eligibility(db, notebook_id)

        db.add.assert_not_called()
        db.commit.assert_not_called()
