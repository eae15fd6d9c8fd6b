"""并发执行器模块。

在有界线程池中执行单张图片任务，结果按提交顺序收集。
"""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar


logger = logging.getLogger(__name__)

TaskInput = TypeVar("TaskInput")
TaskResult = TypeVar("TaskResult")


class ConcurrentExecutor:
    """有序并发执行器

    任务函数自身负责失败隔离，不应抛出异常。
    """

    def __init__(self, max_workers: int = 4):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数，1 表示在当前线程串行执行
        """
        if max_workers <= 0:
            raise ValueError("max_workers 必须大于 0")
        self.max_workers = max_workers

    def execute_tasks(
        self,
        items: Sequence[TaskInput],
        task_function: Callable[[TaskInput], TaskResult],
    ) -> list[TaskResult]:
        """执行任务，返回与 items 顺序一致的结果列表"""
        if not items:
            return []

        if self.max_workers == 1 or len(items) == 1:
            logger.debug(f"串行执行: 任务数={len(items)}")
            return [task_function(item) for item in items]

        workers = min(self.max_workers, len(items))
        logger.debug(f"使用ThreadPoolExecutor: 任务数={len(items)}, 线程数={workers}")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            # 按提交顺序保存 future，而不是按完成顺序
            futures: list[Future[TaskResult]] = [
                executor.submit(task_function, item) for item in items
            ]
            return [future.result() for future in futures]
