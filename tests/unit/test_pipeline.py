"""Tests for wallet_pass.signing.pipeline.

Covers:
- End-to-end signing of a bundle directory into a .pkpass archive
- Manifest / signature consistency inside the archive
- Already-signed bundles with and without force
- Failure handling: no output file, no leftover workspace, FAILED stage
- Workspace cleanup failures: an earlier error wins, otherwise it surfaces
- Descriptor injection from a Template

Signature verification goes through the openssl binary; see the
``openssl_verify`` fixture in conftest.py for when it is skipped.
"""
from __future__ import annotations

import hashlib
import io
import json
import shutil
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from wallet_pass.errors import (
    AlreadySignedError,
    CredentialError,
    InvalidPasswordError,
    MalformedCredentialError,
    PassIOError,
)
from wallet_pass.signing.pipeline import PipelineStage, SigningPipeline, sign_path
from wallet_pass.template import Barcode, BarcodeFormat, Template


def _pipeline(credentials, **kwargs: object) -> SigningPipeline:
    return SigningPipeline(
        certificate_path=credentials.identity_path,
        certificate_password=credentials.password,
        intermediate_path=credentials.intermediate_path,
        **kwargs,  # type: ignore[arg-type]
    )


def _read_archive(path: Path) -> dict[str, bytes]:
    with zipfile.ZipFile(path) as archive:
        return {
            info.filename: archive.read(info)
            for info in archive.infolist()
            if not info.is_dir()
        }


def _tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in root.rglob("*")
        if p.is_file()
    }


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestSigningPipeline:
    def test_produces_signed_archive(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        output = tmp_path / "StoreCard.pkpass"
        pipeline = _pipeline(credentials, tmp_dir=workspace_tmp)

        assert pipeline.run(bundle, output) == output

        files = _read_archive(output)
        assert "manifest.json" in files
        assert "signature" in files
        assert pipeline.stage is PipelineStage.DONE

    def test_manifest_matches_archived_files(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        output = tmp_path / "StoreCard.pkpass"
        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, output)

        files = _read_archive(output)
        manifest = json.loads(files["manifest.json"])
        expected = {
            name: hashlib.sha1(content).hexdigest()
            for name, content in files.items()
            if name not in ("manifest.json", "signature")
        }
        assert manifest == expected
        assert "manifest.json" not in manifest
        assert "signature" not in manifest

    def test_signature_verifies_against_archived_manifest(
        self,
        bundle: Path,
        credentials,
        tmp_path: Path,
        workspace_tmp: Path,
        openssl_verify: Callable[[bytes, bytes, Path], bool],
    ) -> None:
        output = tmp_path / "StoreCard.pkpass"
        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, output)

        files = _read_archive(output)
        assert openssl_verify(files["signature"], files["manifest.json"], credentials.root_path)

    def test_source_bundle_unchanged(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        before = _tree(bundle)
        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, tmp_path / "out.pkpass")
        assert _tree(bundle) == before

    def test_workspace_removed_after_success(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, tmp_path / "out.pkpass")
        assert list(workspace_tmp.iterdir()) == []

    def test_descriptor_only_bundle(
        self, tmp_path: Path, credentials, workspace_tmp: Path
    ) -> None:
        bundle = tmp_path / "Minimal.pass"
        bundle.mkdir()
        (bundle / "pass.json").write_bytes(b'{"description": "minimal"}')
        output = tmp_path / "Minimal.pkpass"

        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, output)

        with zipfile.ZipFile(output) as archive:
            assert sorted(archive.namelist()) == ["manifest.json", "pass.json", "signature"]
            manifest = json.loads(archive.read("manifest.json"))
        assert list(manifest) == ["pass.json"]

    def test_ds_store_excluded(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        (bundle / ".DS_Store").write_bytes(b"finder")
        output = tmp_path / "out.pkpass"
        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, output)
        files = _read_archive(output)
        assert ".DS_Store" not in files
        assert ".DS_Store" not in json.loads(files["manifest.json"])

    def test_stream_output(self, bundle: Path, credentials, workspace_tmp: Path) -> None:
        sink = io.BytesIO()
        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, sink)
        sink.seek(0)
        with zipfile.ZipFile(sink) as archive:
            assert "signature" in archive.namelist()

    def test_pipeline_is_reusable(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        pipeline = _pipeline(credentials, tmp_dir=workspace_tmp)
        pipeline.run(bundle, tmp_path / "first.pkpass")
        pipeline.run(bundle, tmp_path / "second.pkpass")
        first = _read_archive(tmp_path / "first.pkpass")
        second = _read_archive(tmp_path / "second.pkpass")
        assert first["manifest.json"] == second["manifest.json"]


# ---------------------------------------------------------------------------
# Already-signed bundles
# ---------------------------------------------------------------------------


class TestAlreadySigned:
    def test_refuses_without_force(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        (bundle / "manifest.json").write_text("{}")
        (bundle / "signature").write_bytes(b"stale")
        before = _tree(bundle)
        output = tmp_path / "out.pkpass"
        pipeline = _pipeline(credentials, tmp_dir=workspace_tmp)

        with pytest.raises(AlreadySignedError):
            pipeline.run(bundle, output)

        assert _tree(bundle) == before
        assert not output.exists()
        assert list(workspace_tmp.iterdir()) == []
        assert pipeline.stage is PipelineStage.FAILED

    def test_force_removes_artifacts_and_signs(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        fresh = tmp_path / "fresh.pkpass"
        _pipeline(credentials, tmp_dir=workspace_tmp).run(bundle, fresh)

        (bundle / "manifest.json").write_text('{"stale": "0"}')
        (bundle / "signature").write_bytes(b"stale")
        forced = tmp_path / "forced.pkpass"
        _pipeline(credentials, tmp_dir=workspace_tmp, force=True).run(bundle, forced)

        assert not (bundle / "manifest.json").exists()
        assert not (bundle / "signature").exists()
        assert _read_archive(forced)["manifest.json"] == _read_archive(fresh)["manifest.json"]

    def test_force_on_clean_bundle(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        output = tmp_path / "out.pkpass"
        _pipeline(credentials, tmp_dir=workspace_tmp, force=True).run(bundle, output)
        assert output.exists()


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_wrong_password_leaves_nothing_behind(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        output = tmp_path / "out.pkpass"
        pipeline = SigningPipeline(
            certificate_path=credentials.identity_path,
            certificate_password="wrong",
            intermediate_path=credentials.intermediate_path,
            tmp_dir=workspace_tmp,
        )

        with pytest.raises(InvalidPasswordError):
            pipeline.run(bundle, output)

        assert not output.exists()
        assert list(workspace_tmp.iterdir()) == []
        assert pipeline.stage is PipelineStage.FAILED

    def test_malformed_identity(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        garbage = tmp_path / "garbage.p12"
        garbage.write_bytes(b"garbage")
        pipeline = SigningPipeline(
            certificate_path=garbage,
            certificate_password=credentials.password,
            intermediate_path=credentials.intermediate_path,
            tmp_dir=workspace_tmp,
        )
        with pytest.raises(MalformedCredentialError):
            pipeline.run(bundle, tmp_path / "out.pkpass")
        assert list(workspace_tmp.iterdir()) == []

    def test_missing_bundle(self, tmp_path: Path, credentials, workspace_tmp: Path) -> None:
        pipeline = _pipeline(credentials, tmp_dir=workspace_tmp)
        with pytest.raises(PassIOError):
            pipeline.run(tmp_path / "missing.pass", tmp_path / "out.pkpass")
        assert not (tmp_path / "out.pkpass").exists()
        assert list(workspace_tmp.iterdir()) == []

    def test_unwritable_output_location(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        output = tmp_path / "no-such-dir" / "out.pkpass"
        pipeline = _pipeline(credentials, tmp_dir=workspace_tmp)
        with pytest.raises(PassIOError):
            pipeline.run(bundle, output)
        assert not output.exists()
        assert list(workspace_tmp.iterdir()) == []


class TestCleanupFailure:
    @pytest.fixture()
    def failing_rmtree(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _rmtree(path: object, *args: object, **kwargs: object) -> None:
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr(shutil, "rmtree", _rmtree)

    def test_earlier_error_wins_over_cleanup_error(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path, failing_rmtree: None
    ) -> None:
        output = tmp_path / "out.pkpass"
        pipeline = SigningPipeline(
            certificate_path=credentials.identity_path,
            certificate_password="wrong",
            intermediate_path=credentials.intermediate_path,
            tmp_dir=workspace_tmp,
        )

        with pytest.raises(CredentialError) as excinfo:
            pipeline.run(bundle, output)

        assert isinstance(excinfo.value, InvalidPasswordError)
        assert pipeline.stage is PipelineStage.FAILED
        assert not output.exists()

    def test_cleanup_error_surfaces_when_nothing_else_failed(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path, failing_rmtree: None
    ) -> None:
        output = tmp_path / "out.pkpass"
        pipeline = _pipeline(credentials, tmp_dir=workspace_tmp)

        with pytest.raises(PassIOError, match="Cannot remove workspace"):
            pipeline.run(bundle, output)

        assert pipeline.stage is PipelineStage.FAILED
        # The archive was complete before teardown and is kept.
        with zipfile.ZipFile(output) as archive:
            assert {"manifest.json", "signature", "pass.json"} <= set(archive.namelist())


# ---------------------------------------------------------------------------
# Descriptor injection
# ---------------------------------------------------------------------------


class TestTemplateInjection:
    def test_template_replaces_pass_json(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        template = Template(
            description="Injected",
            organization_name="Example Store",
            pass_type_identifier="pass.com.example.store",
            serial_number="9999",
        )
        template.add_barcode(Barcode(format=BarcodeFormat.QR, message="9999"))
        output = tmp_path / "out.pkpass"

        sign_path(
            bundle,
            template,
            credentials.identity_path,
            credentials.password,
            credentials.intermediate_path,
            output,
            tmp_dir=workspace_tmp,
        )

        files = _read_archive(output)
        descriptor = json.loads(files["pass.json"])
        assert descriptor["serialNumber"] == "9999"
        assert descriptor["barcodes"][0]["format"] == "PKBarcodeFormatQR"
        manifest = json.loads(files["manifest.json"])
        assert manifest["pass.json"] == hashlib.sha1(files["pass.json"]).hexdigest()
        # The bundle on disk is not rewritten.
        assert json.loads((bundle / "pass.json").read_text())["serialNumber"] == "0001"

    def test_sign_path_without_template(
        self, bundle: Path, credentials, tmp_path: Path, workspace_tmp: Path
    ) -> None:
        output = tmp_path / "out.pkpass"
        result = sign_path(
            bundle,
            None,
            credentials.identity_path,
            credentials.password,
            credentials.intermediate_path,
            output,
            tmp_dir=workspace_tmp,
        )
        assert result == output
        assert _read_archive(output)["pass.json"] == (bundle / "pass.json").read_bytes()
