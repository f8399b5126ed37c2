"""
비동기 요청/응답 메시지 채널.

페이지 쪽 구성요소와 인증 정보를 가진 백그라운드 서비스를 분리하기 위한 채널입니다.
요청 하나에는 응답이 최대 하나만 돌아가며, 동시에 보낸 요청들의 응답 순서는 보장하지 않습니다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from trustlens.core.exceptions import ChannelError
from trustlens.core.logging import get_logger, log_exception

logger = get_logger(__name__)

Message = dict[str, Any]
Handler = Callable[[Message], Awaitable[Message]]


class MessageChannel:
    """asyncio 기반 메시지 채널.

    수신 측은 listen()으로 핸들러를 등록하고, 송신 측은 send()로 응답을 기다립니다.

    Example:
        ```python
        channel = MessageChannel("background")
        channel.listen(service.handle)
        reply = await channel.send({"action": "analyzeWithGemini", "text": "..."})
        await channel.close()
        ```
    """

    def __init__(self, name: str = "channel"):
        self.name = name
        self._queue: asyncio.Queue[tuple[Message, asyncio.Future]] | None = None
        self._handler: Handler | None = None
        self._worker: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def is_listening(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def listen(self, handler: Handler) -> None:
        """수신 핸들러 등록 및 디스패치 루프 시작.

        실행 중인 이벤트 루프 안에서 호출해야 합니다.
        """
        if self.is_listening:
            raise ChannelError(f"{self.name} 채널에 이미 수신자가 있습니다.")
        self._handler = handler
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._dispatch_loop())

    async def send(self, message: Message) -> Message:
        """메시지 전송 후 응답 대기.

        Raises:
            ChannelError: 수신자가 없거나 채널이 닫힌 경우
        """
        if not self.is_listening or self._queue is None:
            raise ChannelError(
                f"{self.name} 채널에 수신자가 없습니다.",
                details=f"action: {message.get('action')}",
            )

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._queue.put((message, future))
        return await future

    async def _dispatch_loop(self) -> None:
        assert self._queue is not None
        while True:
            message, future = await self._queue.get()
            task = asyncio.create_task(self._handle(message, future))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _handle(self, message: Message, future: asyncio.Future) -> None:
        assert self._handler is not None
        try:
            reply = await self._handler(message)
        except asyncio.CancelledError:
            if not future.done():
                future.set_exception(ChannelError(f"{self.name} 채널이 닫혔습니다."))
            raise
        except Exception as e:
            log_exception(logger, e, f"{self.name} 채널 핸들러 오류")
            reply = {"success": False, "error": str(e)}

        # 송신 측이 타임아웃으로 포기했으면 응답을 버림
        if not future.done():
            future.set_result(reply)

    async def close(self) -> None:
        """디스패치 루프와 처리 중인 요청을 정리."""
        if self._worker is not None:
            self._worker.cancel()
            await asyncio.gather(self._worker, return_exceptions=True)
            self._worker = None

        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()

        if self._queue is not None:
            while not self._queue.empty():
                _, future = self._queue.get_nowait()
                if not future.done():
                    future.set_exception(ChannelError(f"{self.name} 채널이 닫혔습니다."))
            self._queue = None
