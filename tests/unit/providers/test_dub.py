"""Tests for vlens.providers.dub module."""

import json
from pathlib import Path

import pytest

from vlens.config.schemas import DubConfig
from vlens.core.errors import UnknownFileVersionError
from vlens.core.models import VersionType
from vlens.providers.dub import DubPackageClient, read_dub_selections

DUB_API = "https://code.dlang.org/api/packages"


class TestDubPackageClient:
    """Tests for DubPackageClient.fetch_package()."""

    @pytest.mark.asyncio
    async def test_version_objects(self, transport, make_request):
        transport.routes[f"{DUB_API}/vibe-d/info"] = {
            "versions": [
                {"version": "~master"},
                {"version": "0.9.5"},
                {"version": "0.9.7"},
                {"version": "0.10.0"},
                {"version": "0.10.1-beta.1"},
            ]
        }
        client = DubPackageClient(DubConfig(), transport)

        doc = await client.fetch_package(make_request("dub", "vibe-d", "~>0.9.5"))

        assert doc.type is VersionType.RANGE
        assert doc.resolved.version == "~>0.9.5"
        assert doc.releases == ("0.9.5", "0.9.7", "0.10.0")
        assert [(s.name, s.version) for s in doc.suggestions] == [
            ("satisfies", "0.9.7"),
            ("latest", "0.10.0"),
            ("beta", "0.10.1-beta.1"),
        ]

    @pytest.mark.asyncio
    async def test_sends_minimize_query(self, transport, make_request):
        transport.routes[f"{DUB_API}/vibe-d/info"] = {"versions": {"1.0.0": {}}}
        client = DubPackageClient(DubConfig(), transport)

        doc = await client.fetch_package(make_request("dub", "vibe-d", "==1.0.0"))

        _, query, _ = transport.calls[0]
        assert query == {"minimize": "true"}
        assert doc.type is VersionType.FIXED

    @pytest.mark.asyncio
    async def test_not_found(self, transport, make_request):
        client = DubPackageClient(DubConfig(), transport)

        doc = await client.fetch_package(make_request("dub", "nope", "~>1.0"))

        assert doc.suggestions == ()
        assert doc.response.status == 404


class TestReadDubSelections:
    """Tests for read_dub_selections()."""

    def test_reads_version_one(self, temp_dir: Path):
        path = temp_dir / "dub.selections.json"
        path.write_text(json.dumps({"fileVersion": 1, "versions": {"vibe-d": "0.9.7"}}))

        selections = read_dub_selections(path)

        assert selections["versions"] == {"vibe-d": "0.9.7"}

    @pytest.mark.parametrize("file_version", [2, None])
    def test_rejects_other_versions(self, temp_dir: Path, file_version):
        path = temp_dir / "dub.selections.json"
        data = {"versions": {}}
        if file_version is not None:
            data["fileVersion"] = file_version
        path.write_text(json.dumps(data))

        with pytest.raises(UnknownFileVersionError) as exc_info:
            read_dub_selections(path)

        assert exc_info.value.file_version == file_version
