"""Normalize task results from the agent runtime into one async event stream.

The agent runtime may hand back a stream handle, a coroutine, an async
generator, a plain list, an observable, or a single value. `to_event_stream`
accepts any of these and yields events in the order the producer emitted them.
"""

import asyncio
import inspect
import logging
from collections.abc import Iterable, Mapping
from contextlib import aclosing, contextmanager, nullcontext
from enum import Enum
from typing import Any, AsyncIterator, Iterator, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_RELEASE_METHODS = ("unsubscribe", "dispose")


class ProducerKind(Enum):
  """Supported producer shapes, in classification order."""

  EMPTY = "empty"
  ACCESSOR = "accessor"
  AWAITABLE = "awaitable"
  ASYNC_ITERABLE = "async_iterable"
  SYNC_ITERABLE = "sync_iterable"
  SUBSCRIBABLE = "subscribable"
  SCALAR = "scalar"


def _is_sync_iterable(source: Any) -> bool:
  # Text, mappings and event models are single events, not sequences of events
  if isinstance(source, (str, bytes, bytearray, Mapping, BaseModel)):
    return False
  return isinstance(source, Iterable)


def classify_producer(source: Any) -> ProducerKind:
  """Return the shape of `source`. The first matching shape wins."""
  if source is None:
    return ProducerKind.EMPTY
  if callable(getattr(source, "events", None)):
    return ProducerKind.ACCESSOR
  if inspect.isawaitable(source):
    return ProducerKind.AWAITABLE
  if hasattr(source, "__aiter__"):
    return ProducerKind.ASYNC_ITERABLE
  if _is_sync_iterable(source):
    return ProducerKind.SYNC_ITERABLE
  if callable(getattr(source, "subscribe", None)):
    return ProducerKind.SUBSCRIBABLE
  return ProducerKind.SCALAR


class QueueObserver:
  """Observer that buffers pushed values for a pulling consumer.

  Answers to both `next`/`error`/`complete` and the `on_next`/`on_error`/
  `on_completed` names, so either observer convention can drive it.
  Callbacks must run on the event loop's thread.
  """

  def __init__(self):
    self.queue: asyncio.Queue = asyncio.Queue()
    self.done = False
    self.failure: Optional[BaseException] = None
    self._wakeup = object()

  def next(self, value: Any) -> None:
    self.queue.put_nowait(value)

  def error(self, exc: Any) -> None:
    self.failure = exc if isinstance(exc, BaseException) else RuntimeError(repr(exc))
    self.queue.put_nowait(self._wakeup)

  def complete(self) -> None:
    self.done = True
    self.queue.put_nowait(self._wakeup)

  on_next = next
  on_error = error
  on_completed = complete

  async def drain(self) -> AsyncIterator[Any]:
    """Yield buffered values until completion, raising a recorded error first."""
    while not self.done or not self.queue.empty():
      # A recorded error wins over anything still queued
      if self.failure is not None:
        raise self.failure
      item = await self.queue.get()
      if self.failure is not None:
        raise self.failure
      if item is self._wakeup:
        continue
      yield item


def _release(subscription: Any) -> None:
  for method in _RELEASE_METHODS:
    release = getattr(subscription, method, None)
    if callable(release):
      logger.debug("Releasing subscription via %s()", method)
      release()
      return


@contextmanager
def subscribed(source: Any, observer: QueueObserver) -> Iterator[Any]:
  """Subscribe `observer` to `source`; release the handle when the block exits."""
  subscription = source.subscribe(observer)
  try:
    yield subscription
  finally:
    if subscription is not None:
      _release(subscription)


async def _drain_subscription(source: Any) -> AsyncIterator[Any]:
  observer = QueueObserver()
  with subscribed(source, observer):
    async with aclosing(observer.drain()) as items:
      async for item in items:
        yield item


def _closing(events: Any):
  if hasattr(events, "aclose"):
    return aclosing(events)
  return nullcontext(events)


async def to_event_stream(source: Any) -> AsyncIterator[Any]:
  """Yield the events produced by `source`, whatever its shape.

  Errors raised by the producer propagate to the caller unchanged. For
  subscribable producers the subscription is released however iteration
  ends, including when the caller stops early.
  """
  kind = classify_producer(source)
  logger.debug("Normalizing %s producer (%s)", kind.value, type(source).__name__)

  if kind is ProducerKind.EMPTY:
    return

  if kind is ProducerKind.SCALAR:
    yield source
    return

  if kind is ProducerKind.SYNC_ITERABLE:
    for event in source:
      yield event
    return

  if kind is ProducerKind.ACCESSOR:
    inner = to_event_stream(source.events())
  elif kind is ProducerKind.AWAITABLE:
    inner = to_event_stream(await source)
  elif kind is ProducerKind.SUBSCRIBABLE:
    inner = _drain_subscription(source)
  else:
    inner = source

  async with _closing(inner) as events:
    async for event in events:
      yield event
