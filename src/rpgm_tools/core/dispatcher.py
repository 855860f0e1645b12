"""
带指数退避的翻译调度

with_retry 包装单个可失败的异步操作：
- 成功立即返回
- 失败时用 is_retryable 判定；次数用尽或不可重试时原样抛出最后一次的异常
- 否则等待 min(initial_delay * backoff_factor^(attempt-1), max_delay) 秒后重试

等待通过 asyncio 挂起当前任务，不阻塞其它并发任务。
同一翻译单元的并发去重由调用方负责。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, Optional, Protocol, Sequence, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .models import TranslationUnit
from .stats import TranslationStats, update_stats

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


def _always_retry(error: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class RetryConfig:
    """重试配置（时间单位：秒）

    Attributes:
        max_attempts: 最多调用次数（含首次）
        initial_delay: 首次重试前的等待
        max_delay: 单次等待上限
        backoff_factor: 退避倍数
        is_retryable: 判定异常是否值得重试
        on_retry: 每次等待前回调 (attempt, error, delay)
        on_success: 成功后回调 (attempt)
        on_failure: 放弃时回调 (attempt, error)，之后抛出该异常
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    is_retryable: Callable[[BaseException], bool] = _always_retry
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None
    on_success: Optional[Callable[[int], None]] = None
    on_failure: Optional[Callable[[int, BaseException], None]] = None

    def __post_init__(self):
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be positive")
        if self.max_delay <= 0:
            raise ValueError("max_delay must be positive")
        if self.backoff_factor <= 0:
            raise ValueError("backoff_factor must be positive")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be greater than or equal to initial_delay")

    def delay_for(self, attempt: int) -> float:
        """第 attempt 次（从 1 开始）失败后的等待时间"""
        return min(self.initial_delay * self.backoff_factor ** (attempt - 1), self.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """执行 operation，失败时按 config 退避重试

    Args:
        operation: 无参异步函数，每次尝试调用一次
        config: 重试配置，默认 RetryConfig()
        sleep: 等待函数（测试时可替换）

    Returns:
        operation 的返回值

    Raises:
        operation 最后一次抛出的原始异常
    """
    config = config or RetryConfig()

    def should_retry(error: BaseException) -> bool:
        # 取消等非 Exception 信号直接向上传播
        return isinstance(error, Exception) and config.is_retryable(error)

    def before_sleep(state: RetryCallState) -> None:
        error = state.outcome.exception()
        delay = state.next_action.sleep
        logger.warning(
            f"Attempt {state.attempt_number}/{config.max_attempts} failed: {error!r}; "
            f"retrying in {delay:.2f}s"
        )
        if config.on_retry is not None:
            config.on_retry(state.attempt_number, error, delay)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential(
            multiplier=config.initial_delay,
            exp_base=config.backoff_factor,
            max=config.max_delay,
        ),
        retry=retry_if_exception(should_retry),
        before_sleep=before_sleep,
        sleep=sleep,
        reraise=True,
    )
    try:
        result = await retrying(operation)
    except Exception as e:
        attempts = retrying.statistics.get("attempt_number", 1)
        if attempts >= config.max_attempts:
            logger.error(f"Giving up after {attempts} attempt(s): {e!r}")
        if config.on_failure is not None:
            config.on_failure(attempts, e)
        raise
    if config.on_success is not None:
        config.on_success(retrying.statistics.get("attempt_number", 1))
    return result


# ========================================
# 批量调度
# ========================================

@dataclass(frozen=True)
class BatchOptions:
    """传给翻译提供方的批次选项"""

    source_language: str = "ja"
    target_language: str = "en"
    prompt_type: str = "general"
    batch_size: int = 20
    timeout: Optional[float] = None
    continue_on_error: bool = False


@dataclass(frozen=True)
class BatchError:
    text: str
    error: str
    retry_count: int = 0


@dataclass
class BatchResult:
    translations: list[TranslationUnit] = field(default_factory=list)
    stats: Optional[TranslationStats] = None
    errors: list[BatchError] = field(default_factory=list)


class TranslationProvider(Protocol):
    """翻译提供方（本地或远端模型），由调用方实现"""

    async def translate_batch(
        self,
        units: Sequence[TranslationUnit],
        options: BatchOptions,
    ) -> BatchResult:
        ...


async def dispatch_batch(
    provider: TranslationProvider,
    units: Sequence[TranslationUnit],
    options: Optional[BatchOptions] = None,
    retry_config: Optional[RetryConfig] = None,
    stats: Optional[TranslationStats] = None,
    sleep: SleepFn = asyncio.sleep,
) -> BatchResult:
    """以重试方式调用一次 translate_batch，并把结果累加进 stats"""
    options = options or BatchOptions()

    async def attempt() -> BatchResult:
        call = provider.translate_batch(units, options)
        if options.timeout is not None:
            return await asyncio.wait_for(call, options.timeout)
        return await call

    result = await with_retry(attempt, retry_config, sleep=sleep)
    if stats is not None:
        update_stats(stats, result.translations)
    return result


async def dispatch_in_batches(
    provider: TranslationProvider,
    units: Sequence[TranslationUnit],
    options: Optional[BatchOptions] = None,
    retry_config: Optional[RetryConfig] = None,
    stats: Optional[TranslationStats] = None,
    sleep: SleepFn = asyncio.sleep,
) -> BatchResult:
    """按 batch_size 切分后依次调度，结果按输入顺序拼接

    continue_on_error 为 True 时，重试耗尽的批次记为错误并计入失败数，
    其余批次继续；否则第一个失败批次的异常直接抛出。
    """
    options = options or BatchOptions()
    retry_config = retry_config or RetryConfig()
    size = max(1, options.batch_size)
    merged = BatchResult(stats=stats)
    attempts_used = [0]
    user_on_failure = retry_config.on_failure

    def record_failure(attempt: int, error: BaseException) -> None:
        attempts_used[0] = attempt
        if user_on_failure is not None:
            user_on_failure(attempt, error)

    chunk_config = replace(retry_config, on_failure=record_failure)

    for start in range(0, len(units), size):
        chunk = units[start:start + size]
        attempts_used[0] = 0
        try:
            result = await dispatch_batch(provider, chunk, options, chunk_config, stats, sleep=sleep)
        except Exception as e:
            if not options.continue_on_error:
                raise
            logger.error(f"Batch {start // size + 1} failed after retries: {e!r}")
            merged.errors.extend(
                BatchError(text=u.source, error=str(e), retry_count=max(0, attempts_used[0] - 1))
                for u in chunk
            )
            if stats is not None:
                stats.failed_translations += len(chunk)
            continue
        merged.translations.extend(result.translations)
        merged.errors.extend(result.errors)

    return merged
