import logging
import threading
from contextlib import contextmanager
from typing import Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from zenkit.core.errors import ConcurrencyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RWLock:
    """
    多读单写锁

    只用于保护纯内存操作，持有期间禁止 await 任何网络请求。
    写者优先: 有写者等待时新的读者会阻塞，避免写者饿死。
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise ConcurrencyError("release_read called without a matching reader")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise ConcurrencyError("release_write called without a matching writer")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class CachedCollection(Generic[T]):
    """
    可增长的缓存集合，查找为线性扫描

    条目只追加不修改，整体失效只能通过 clear()。
    查找返回条目本身 (共享只读引用)，调用方拿到引用后锁即释放。
    """

    def __init__(self, name: str):
        self.name = name
        self._items: List[T] = []
        self._lock = RWLock()
        logger.debug("CachedCollection '%s' initialized", name)

    def find(self, predicate: Callable[[T], bool]) -> Optional[T]:
        with self._lock.read():
            for item in self._items:
                if predicate(item):
                    logger.debug("Cache hit: %s", self.name)
                    return item
        logger.debug("Cache miss: %s", self.name)
        return None

    def snapshot(self) -> Tuple[T, ...]:
        with self._lock.read():
            return tuple(self._items)

    def add(self, item: T, same: Optional[Callable[[T], bool]] = None) -> T:
        """
        追加一个条目并返回缓存中的实例

        如果提供了 same 且缓存中已有匹配条目 (并发拉取同一对象时可能发生)，
        保留已有实例并返回它。
        """
        with self._lock.write():
            if same is not None:
                for existing in self._items:
                    if same(existing):
                        logger.warning(
                            "Cache '%s' already holds this entry, keeping the existing one",
                            self.name,
                        )
                        return existing
            self._items.append(item)
        logger.debug("Cache set: %s (size=%d)", self.name, len(self))
        return item

    def extend(
        self,
        items: Iterable[T],
        key: Optional[Callable[[T], object]] = None,
    ) -> int:
        """批量追加，key 相同的条目不重复插入。返回新增条目数"""
        added = 0
        with self._lock.write():
            existing_keys = (
                {key(item) for item in self._items} if key is not None else set()
            )
            for item in items:
                if key is not None:
                    k = key(item)
                    if k in existing_keys:
                        continue
                    existing_keys.add(k)
                self._items.append(item)
                added += 1
        logger.debug("Cache extended: %s (+%d)", self.name, added)
        return added

    def clear(self) -> None:
        with self._lock.write():
            cache_size = len(self._items)
            self._items.clear()
        logger.info("Cache cleared: %s, removed %d entries", self.name, cache_size)

    def is_empty(self) -> bool:
        with self._lock.read():
            return not self._items

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._items)
