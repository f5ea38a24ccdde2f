"""并发执行器模块。

把彼此独立的单图任务分发到有界工作池，并按输入顺序交付结果。
"""

import threading
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import (
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from typing import TypeVar

from ..exceptions import ExportCancelledError, ValidationError
from ..utils.logging_helpers import get_logger


logger = get_logger()
T = TypeVar("T")
R = TypeVar("R")

EXECUTOR_TYPES = {"thread", "process"}


class ConcurrentExecutor:
    """有序并发执行器

    同时在途的任务数不超过 ``max_workers``；结果一旦与之前的结果连续
    就按输入顺序交付。任一任务失败或取消时，停止提交新任务并取消未开始的任务。
    """

    def __init__(self, max_workers: int = 4, executor_type: str = "thread"):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数
            executor_type: 执行器类型 ('thread'/'process')
        """
        if max_workers <= 0:
            raise ValidationError(f"max_workers 必须大于 0，当前值: {max_workers}")
        if executor_type not in EXECUTOR_TYPES:
            raise ValidationError(
                f"executor_type 必须是 'thread' 或 'process'，当前值: {executor_type}"
            )
        self.max_workers = max_workers
        self.executor_type = executor_type

    def iter_ordered(
        self,
        items: Sequence[T],
        task_function: Callable[[T], R],
        cancel_event: threading.Event | None = None,
    ) -> Iterator[R]:
        """并发执行任务，按输入顺序逐个产出结果

        Args:
            items: 任务输入
            task_function: 单个任务函数，进程池模式下必须可被 pickle
            cancel_event: 取消信号，置位后不再提交新任务

        Yields:
            任务结果，顺序与 ``items`` 一致

        Raises:
            ExportCancelledError: 执行过程中收到取消信号
        """
        if not items:
            return

        executor_class = self._choose_executor()
        workers = min(self.max_workers, len(items))
        logger.debug(
            f"使用{executor_class.__name__}: 任务数={len(items)}, 并发数={workers}"
        )

        with executor_class(max_workers=workers) as executor:
            in_flight: dict[Future[R], int] = {}
            finished: dict[int, R] = {}
            next_submit = 0
            next_yield = 0

            try:
                while next_yield < len(items):
                    _check_cancelled(cancel_event)

                    # 补满工作池
                    while next_submit < len(items) and len(in_flight) < workers:
                        future = executor.submit(task_function, items[next_submit])
                        in_flight[future] = next_submit
                        next_submit += 1

                    done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                    for future in done:
                        index = in_flight.pop(future)
                        # 任务异常在这里抛出，中止整个批次
                        finished[index] = future.result()

                    while next_yield in finished:
                        yield finished.pop(next_yield)
                        next_yield += 1
            finally:
                for future in in_flight:
                    future.cancel()

    def execute_ordered(
        self,
        items: Sequence[T],
        task_function: Callable[[T], R],
        cancel_event: threading.Event | None = None,
    ) -> list[R]:
        """并发执行任务并按输入顺序返回全部结果"""
        return list(self.iter_ordered(items, task_function, cancel_event))

    def _choose_executor(self) -> type[Executor]:
        """选择执行器类

        Pillow 的解码和编码会释放 GIL，默认使用线程池。
        """
        if self.executor_type == "process":
            return ProcessPoolExecutor
        return ThreadPoolExecutor


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ExportCancelledError("导出已取消")
