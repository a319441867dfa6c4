"""
Flow control for one client transport.

Reading is paused while the session has more unread lines queued than HIGH_WATER_LINES, so a client
that floods guesses cannot grow the queue without bound. It resumes once the session catches up.
Writing is paused by the transport itself (pause_writing/resume_writing callbacks); writers wait on drain().
"""


import asyncio

HIGH_WATER_LINES = 64


class FlowControl:

    def __init__(self, transport: asyncio.Transport):
        self._read_paused = False
        self._write_paused = False
        self._write_event: asyncio.Event = asyncio.Event()
        self._write_event.set() # writing is allowed initially
        self._transport = transport

    @property
    def read_paused(self) -> bool:
        return self._read_paused

    @property
    def write_paused(self) -> bool:
        return self._write_paused

    async def drain(self):
        await self._write_event.wait()

    def pause_reading(self):
        if not self._read_paused:
            self._read_paused = True
            self._transport.pause_reading()

    def resume_reading(self):
        if self._read_paused:
            self._read_paused = False
            if not self._transport.is_closing():
                self._transport.resume_reading()

    def pause_writing(self):
        if not self._write_paused:
            self._write_paused = True
            self._write_event.clear()

    def resume_writing(self):
        if self._write_paused:
            self._write_paused = False
            self._write_event.set()
