"""批量处理器测试。

测试批次校验、顺序保持、失败隔离与暂存文件清理。
"""

from pathlib import Path

import pytest

from py_batch_compress_mcp.core.sink import HandleSink, InlineSink
from py_batch_compress_mcp.engine.batch import BatchProcessor
from py_batch_compress_mcp.engine.concurrent_executor import ConcurrentExecutor
from py_batch_compress_mcp.engine.intake import stage_parts
from py_batch_compress_mcp.engine.resolver import ParameterResolver
from py_batch_compress_mcp.exceptions import BatchValidationError, CompressionError
from py_batch_compress_mcp.models.batch_result import ImageFailure, ImageSuccess
from tests.conftest import CORRUPT_BYTES, image_bytes, make_part, stage_image


class TestBatchValidation:
    """批次校验测试"""

    def test_empty_batch_rejected(self, app_config):
        processor = BatchProcessor(InlineSink())

        with pytest.raises(BatchValidationError) as exc_info:
            processor.process([], {"convert_to": "webp"})

        assert exc_info.value.message == "No images uploaded"


class TestOrderingAndIsolation:
    """顺序与隔离测试"""

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_result_order_matches_input(self, staging_dir, app_config, max_workers):
        sizes = [(300, 100), (20, 20), (150, 150), (64, 32), (500, 80)]
        images = [
            stage_image(staging_dir, f"img_{i}.png", image_bytes(size))
            for i, size in enumerate(sizes)
        ]
        processor = BatchProcessor(InlineSink(), max_workers=max_workers)

        result = processor.process(images, {"convert_to": "webp,png"})

        assert result.get_total_count() == len(images)
        assert [r.original_name for r in result.results] == [
            f"img_{i}.png" for i in range(len(sizes))
        ]
        for image_result, image in zip(result.results, images, strict=True):
            assert isinstance(image_result, ImageSuccess)
            assert image_result.original_size == image.original_size
            assert [o.format for o in image_result.outputs] == ["webp", "png"]

    def test_corrupt_first_does_not_affect_second(self, staging_dir, app_config):
        valid = image_bytes((120, 80))
        alone = BatchProcessor(InlineSink()).process(
            [stage_image(staging_dir, "good.png", valid)], {}
        )

        result = BatchProcessor(InlineSink()).process(
            [
                stage_image(staging_dir, "broken.jpg", CORRUPT_BYTES),
                stage_image(staging_dir, "good.png", valid),
            ],
            {},
        )

        first, second = result.results
        assert isinstance(first, ImageFailure)
        assert first.original_name == "broken.jpg"
        assert "outputs" not in first.to_response()
        assert "error" in first.to_response()

        assert isinstance(second, ImageSuccess)
        assert "error" not in second.to_response()
        assert second.to_response() == alone.results[0].to_response()

    def test_unknown_format_fails_every_image(self, staging_dir, app_config):
        images = [
            stage_image(staging_dir, "a.png", image_bytes()),
            stage_image(staging_dir, "b.png", image_bytes()),
        ]
        result = BatchProcessor(InlineSink()).process(images, {"convert_to": "png,gif"})

        assert result.get_failure_count() == 2
        assert all("'gif'" in r.error for r in result.results)

    def test_unexpected_exception_isolated(self, staging_dir, app_config, monkeypatch):
        """流水线内的非预期异常也被限制在单张图片内"""
        from py_batch_compress_mcp.core import pipeline as pipeline_module

        original_run = pipeline_module.TransformPipeline.run

        def flaky_run(self, image):
            if image.original_name == "boom.png":
                raise RuntimeError("unexpected")
            return original_run(self, image)

        monkeypatch.setattr(pipeline_module.TransformPipeline, "run", flaky_run)
        images = [
            stage_image(staging_dir, "boom.png", image_bytes()),
            stage_image(staging_dir, "fine.png", image_bytes()),
        ]

        result = BatchProcessor(InlineSink()).process(images, {})

        assert isinstance(result.results[0], ImageFailure)
        assert "unexpected" in result.results[0].error
        assert isinstance(result.results[1], ImageSuccess)


class TestCleanup:
    """暂存文件清理测试"""

    def test_staged_inputs_removed_on_success_and_failure(self, staging_dir, app_config):
        images = [
            stage_image(staging_dir, "ok.png", image_bytes()),
            stage_image(staging_dir, "bad.png", CORRUPT_BYTES),
            stage_image(staging_dir, "fmt.png", image_bytes()),
        ]

        BatchProcessor(InlineSink()).process(images, {})
        BatchProcessor(InlineSink()).process(
            [stage_image(staging_dir, "fmt2.png", image_bytes())],
            {"convert_to": "nope"},
        )

        assert list(staging_dir.iterdir()) == []

    def test_handle_mode_only_successful_artifacts(self, staging_dir, tmp_path, app_config):
        artifact_dir = tmp_path / "artifacts"
        artifact_dir.mkdir()
        images = [
            stage_image(staging_dir, "ok.png", image_bytes()),
            stage_image(staging_dir, "bad.png", CORRUPT_BYTES),
        ]

        result = BatchProcessor(HandleSink(artifact_dir)).process(
            images, {"convert_to": ["webp", "jpeg"]}
        )

        assert result.get_success_count() == 1
        assert len(list(artifact_dir.iterdir())) == 2
        assert list(staging_dir.iterdir()) == []


class TestResolverUsage:
    def test_resolved_once_per_batch(self, staging_dir, app_config):
        class CountingResolver(ParameterResolver):
            calls = 0

            def resolve(self, fields):
                CountingResolver.calls += 1
                return super().resolve(fields)

        images = [
            stage_image(staging_dir, f"{i}.png", image_bytes((30, 30)))
            for i in range(3)
        ]
        BatchProcessor(InlineSink(), resolver=CountingResolver()).process(images, {})

        assert CountingResolver.calls == 1


class TestConcurrentExecutor:
    """有序并发执行器测试"""

    def test_preserves_submission_order(self):
        import time

        def slow_for_small(n: int) -> int:
            time.sleep(0.01 * (5 - n))
            return n * 10

        executor = ConcurrentExecutor(max_workers=5)
        assert executor.execute_tasks([0, 1, 2, 3, 4], slow_for_small) == [
            0,
            10,
            20,
            30,
            40,
        ]

    def test_empty(self):
        assert ConcurrentExecutor().execute_tasks([], lambda x: x) == []

    def test_rejects_non_positive_workers(self):
        with pytest.raises(ValueError):
            ConcurrentExecutor(max_workers=0)


class TestIntake:
    """上传部分暂存测试"""

    def test_partial_write_cleaned_up(self, staging_dir, monkeypatch):
        """写入中途失败时，已写入的文件和半成品都被删除"""
        original_write = Path.write_bytes

        def failing_write(self, data):
            if self.name.endswith("_second.png"):
                with self.open("wb") as fh:
                    fh.write(data[:3])
                raise OSError("disk full")
            return original_write(self, data)

        monkeypatch.setattr(Path, "write_bytes", failing_write)
        parts = [
            make_part("first.png", image_bytes()),
            make_part("second.png", image_bytes()),
        ]

        with pytest.raises(CompressionError) as exc_info:
            stage_parts(parts, staging_dir)

        assert "disk full" in exc_info.value.message
        assert list(staging_dir.iterdir()) == []

    def test_staged_in_order(self, staging_dir):
        parts = [make_part(f"{i}.png", bytes([i]) * (i + 1)) for i in range(3)]

        staged = stage_parts(parts, staging_dir)

        assert [image.original_name for image in staged] == ["0.png", "1.png", "2.png"]
        assert [image.original_size for image in staged] == [1, 2, 3]
        assert all(image.path.parent == staging_dir for image in staged)
