"""集成测试。

测试从上传部分到 JSON 响应的端到端流程以及 MCP 服务器。
"""

import importlib
from pathlib import Path

import pytest

from py_batch_compress_mcp.compressor import BatchCompressor
from py_batch_compress_mcp.exceptions import BatchValidationError
from tests.conftest import CORRUPT_BYTES, image_bytes, make_part, open_output


class TestBatchCompressor:
    """批量压缩器端到端测试"""

    def test_storage_dirs_created(self, app_config):
        BatchCompressor(app_config)

        assert app_config.staging_dir.is_dir()
        assert app_config.artifact_dir.is_dir()
        assert app_config.log_dir.is_dir()

    def test_no_images_is_client_error(self, app_config):
        compressor = BatchCompressor(app_config)
        parts = [make_part("notes.txt", b"hello", field_name="attachment")]

        status, body = compressor.handle_request(parts, {"convert_to": "webp"})

        assert status == 400
        assert body == {"error": "No images uploaded"}
        assert list(app_config.staging_dir.iterdir()) == []

    def test_compress_raises_on_empty(self, app_config):
        with pytest.raises(BatchValidationError):
            BatchCompressor(app_config).compress([], {})

    def test_only_image_fields_processed(self, app_config):
        compressor = BatchCompressor(app_config)
        parts = [
            make_part("a.png", image_bytes(), field_name="images[]"),
            make_part("avatar.png", image_bytes(), field_name="avatar"),
            make_part("b.jpg", image_bytes(format="JPEG"), field_name="images"),
        ]

        status, body = compressor.handle_request(parts, {})

        assert status == 200
        assert [item["original_name"] for item in body] == ["a.png", "b.jpg"]
        assert [item["outputs"][0]["format"] for item in body] == ["png", "jpeg"]

    def test_full_request(self, app_config):
        compressor = BatchCompressor(app_config, max_workers=2)
        data = image_bytes((400, 300))
        parts = [
            make_part("broken.png", CORRUPT_BYTES),
            make_part("photo.png", data),
        ]
        fields = {
            "quality_webp": "60",
            "resize_width": "200",
            "resize_height": "200",
            "crop": "1",
            "convert_to": "webp, png",
        }

        status, body = compressor.handle_request(parts, fields)

        assert status == 200
        assert len(body) == 2
        assert set(body[0]) == {"original_name", "error"}
        assert body[1]["original_size"] == len(data)

        outputs = body[1]["outputs"]
        assert [o["format"] for o in outputs] == ["webp", "png"]
        for output in outputs:
            assert open_output(output["compressed_file"]).size == (200, 200)
            expected = round((1 - output["compressed_size"] / len(data)) * 100, 2)
            assert output["ratio"] == f"{expected:.2f}%"

        assert list(app_config.staging_dir.iterdir()) == []

    def test_handle_mode(self, handle_config):
        compressor = BatchCompressor(handle_config)
        parts = [make_part("photo.png", image_bytes())]

        status, body = compressor.handle_request(parts, {"convert_to": ["jpeg"]})

        assert status == 200
        output = body[0]["outputs"][0]
        assert "compressed_file" not in output
        assert output["compressed_url"].startswith("https://cdn.example.com/compressed/")

        artifact = handle_config.artifact_dir / output["compressed_url"].rsplit("/", 1)[-1]
        assert artifact.stat().st_size == output["compressed_size"]
        assert list(handle_config.staging_dir.iterdir()) == []

    def test_compress_files_from_directory(self, app_config, tmp_path: Path):
        source_dir = tmp_path / "source"
        source_dir.mkdir()
        (source_dir / "b.png").write_bytes(image_bytes())
        (source_dir / "a.jpg").write_bytes(image_bytes(format="JPEG"))
        (source_dir / "readme.txt").write_text("skip me")

        result = BatchCompressor(app_config).compress_files([source_dir], {})

        assert [r.original_name for r in result.results] == ["a.jpg", "b.png"]
        assert result.get_success_count() == 2

    def test_compress_files_one_result_per_path(self, app_config, tmp_path: Path):
        good = tmp_path / "good.png"
        good.write_bytes(image_bytes())
        paths = [tmp_path / "gone.jpg", good, tmp_path / "also_gone.png"]

        result = BatchCompressor(app_config).compress_files(paths, {})

        assert [r.original_name for r in result.results] == [
            "gone.jpg",
            "good.png",
            "also_gone.png",
        ]
        assert [r.success for r in result.results] == [False, True, False]
        assert list(app_config.staging_dir.iterdir()) == []

    def test_compress_files_all_missing(self, app_config, tmp_path: Path):
        result = BatchCompressor(app_config).compress_files(
            [tmp_path / "a.png", tmp_path / "b.png"], {}
        )

        assert result.get_total_count() == 2
        assert result.get_failure_count() == 2

    def test_compress_files_without_paths(self, app_config):
        with pytest.raises(BatchValidationError):
            BatchCompressor(app_config).compress_files([], {})


class TestMCPServer:
    """MCP服务器功能测试"""

    @pytest.fixture
    def server(self, app_config, monkeypatch):
        module = importlib.import_module("py_batch_compress_mcp.mcp_server")
        monkeypatch.setattr(module, "compressor", BatchCompressor(app_config))
        return module

    def test_mcp_server_imports(self, server):
        assert server.mcp is not None

    def test_build_fields(self, server):
        fields = server.build_fields(quality_webp=50, crop=True, convert_to="webp")

        assert fields == {
            "quality_webp": 50,
            "crop": 1,
            "keep_transparency": 0,
            "convert_to": "webp",
        }

    def test_run_batch(self, server, tmp_path: Path):
        image_path = tmp_path / "pic.png"
        image_path.write_bytes(image_bytes())

        response = server.run_batch(
            [str(image_path)], server.build_fields(convert_to=["webp"])
        )

        assert response["success"] is True
        assert response["status"] == 200
        assert response["results"][0]["original_name"] == "pic.png"
        assert response["results"][0]["outputs"][0]["format"] == "webp"

    def test_run_batch_without_paths(self, server):
        response = server.run_batch([], {})

        assert response["success"] is False
        assert response["status"] == 400
        assert response["error"] == "No images uploaded"
        assert response["error_type"] == "validation"

    def test_missing_path_keeps_its_slot(self, server, tmp_path: Path):
        missing = tmp_path / "missing.png"
        good = tmp_path / "good.png"
        good.write_bytes(image_bytes())

        response = server.run_batch([str(missing), str(good)], {})

        assert response["success"] is True
        results = response["results"]
        assert [r["original_name"] for r in results] == ["missing.png", "good.png"]
        assert results[0] == {
            "original_name": "missing.png",
            "error": f"文件不存在: {missing}",
        }
        assert results[1]["outputs"][0]["format"] == "png"
