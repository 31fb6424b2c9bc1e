"""Tests for vlens.core.factories module."""

from vlens.core.errors import TransportError
from vlens.core.factories import (
    create_error,
    create_no_match,
    create_not_found,
    create_response_status,
    create_success,
    create_unsupported,
)
from vlens.core.models import PackageSource, RequestedPackage, ResponseSource, VersionType
from vlens.core.suggestions import SuggestionStatus

REQUESTED = RequestedPackage(name="left-pad", version="next", path="/project")


class TestCreateNotFound:
    """Tests for create_not_found()."""

    def test_document_has_no_suggestions(self):
        doc = create_not_found(
            "npm", REQUESTED, None, create_response_status(ResponseSource.REMOTE, 404)
        )

        assert doc.provider_name == "npm"
        assert doc.type is None
        assert doc.resolved is None
        assert doc.suggestions == ()
        assert doc.releases == ()
        assert doc.response.status == 404

    def test_keeps_known_releases(self):
        doc = create_not_found(
            "npm", REQUESTED, ["1.0.0"], create_response_status(ResponseSource.REMOTE, 404)
        )

        assert doc.releases == ("1.0.0",)


class TestCreateNoMatch:
    """Tests for create_no_match()."""

    def test_no_match_document(self):
        doc = create_no_match(
            "npm",
            PackageSource.REGISTRY,
            VersionType.TAG,
            REQUESTED,
            create_response_status(ResponseSource.REMOTE, 200),
            "1.3.0",
        )

        assert doc.type is VersionType.NO_MATCH
        assert doc.requested == REQUESTED
        assert [s.name for s in doc.suggestions] == [SuggestionStatus.NO_MATCH, "latest"]
        assert doc.suggestions[1].version == "1.3.0"


class TestCreateUnsupported:
    """Tests for create_unsupported()."""

    def test_unsupported_document(self):
        requested = RequestedPackage(name="mylib", version="file:../mylib", path="/project")

        doc = create_unsupported("npm", requested)

        assert doc.type is VersionType.UNSUPPORTED
        assert doc.requested is requested
        assert doc.resolved is None
        assert doc.response.source is ResponseSource.LOCAL
        assert [(s.name, s.version) for s in doc.suggestions] == [
            (SuggestionStatus.UNSUPPORTED, ""),
        ]


class TestResponses:
    """Tests for create_success() and create_error()."""

    def test_success_and_error_are_exclusive(self, make_request):
        request = make_request("npm", "left-pad", "^1.0.0")
        doc = create_not_found(
            "npm", request.package, None, create_response_status(ResponseSource.REMOTE, 404)
        )

        success = create_success(request, doc)
        failure = create_error(request, TransportError("boom", status=500))

        assert not success.rejected
        assert success.document is doc
        assert failure.rejected
        assert failure.document is None

    def test_to_dict(self, make_request):
        request = make_request("npm", "left-pad", "next")
        doc = create_no_match(
            "npm",
            PackageSource.REGISTRY,
            VersionType.TAG,
            request.package,
            create_response_status(ResponseSource.CACHE, 200),
            "1.3.0",
        )

        data = create_success(request, doc).to_dict()

        assert data["package"] == {"name": "left-pad", "version": "next", "path": "/project"}
        assert data["type"] == "no-match"
        assert data["response"] == {"source": "cache", "status": 200}
        assert data["resolved"] is None
        assert data["suggestions"][1] == {"name": "latest", "version": "1.3.0", "flags": 1}

    def test_error_to_dict(self, make_request):
        request = make_request("npm", "left-pad", "^1.0.0")

        data = create_error(request, TransportError("HTTP 500")).to_dict()

        assert data["error"] == "HTTP 500"
        assert "suggestions" not in data
