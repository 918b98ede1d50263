"""Tests for ReadFileMiddleware wiring into the agent loop."""

import asyncio
import threading
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from langchain_core.messages import ToolMessage

from octo.config.schema import ReadToolConfig
from octo.filesystem.middleware import ReadFileMiddleware
from tests.fakes.memory_backend import MemoryBackend

CWD = "/work"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


def _middleware(files=None, **kwargs):
    backend = MemoryBackend({f"{CWD}/{name}": data for name, data in (files or {}).items()})
    return ReadFileMiddleware(CWD, operations=backend, **kwargs), backend


def _call(name, args, call_id="call_1"):
    return SimpleNamespace(tool_call={"name": name, "args": args, "id": call_id})


class TestSchemaInjection:
    def test_appends_read_schema(self):
        mw, _ = _middleware()
        request = MagicMock()
        request.tools = [{"type": "function", "function": {"name": "bash"}}]

        mw.wrap_model_call(request, lambda r: r)

        tools = request.override.call_args.kwargs["tools"]
        assert [t["function"]["name"] for t in tools] == ["bash", "read"]
        assert tools[1]["function"]["parameters"]["required"] == ["path"]

    @pytest.mark.asyncio
    async def test_async_handles_missing_tools(self):
        mw, _ = _middleware()
        request = MagicMock()
        request.tools = None

        async def handler(r):
            return r

        await mw.awrap_model_call(request, handler)

        tools = request.override.call_args.kwargs["tools"]
        assert len(tools) == 1


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_text_read(self):
        mw, _ = _middleware({"a.txt": b"alpha\nbeta"})

        msg = await mw.awrap_tool_call(_call("read", {"path": "a.txt"}), None)

        assert isinstance(msg, ToolMessage)
        assert msg.tool_call_id == "call_1"
        assert msg.name == "read"
        assert msg.status == "success"
        assert msg.content == [{"type": "text", "text": "alpha\nbeta"}]

    @pytest.mark.asyncio
    async def test_image_read_returns_text_then_image(self):
        mw, _ = _middleware({"p.png": PNG_BYTES}, config=ReadToolConfig(auto_resize_images=False))

        msg = await mw.awrap_tool_call(_call("read", {"path": "p.png"}), None)

        assert [b["type"] for b in msg.content] == ["text", "image"]
        assert msg.content[1]["mime_type"] == "image/png"

    @pytest.mark.asyncio
    async def test_string_arguments_coerced(self):
        mw, _ = _middleware({"a.txt": b"1\n2\n3\n4"})

        msg = await mw.awrap_tool_call(_call("read", {"path": "a.txt", "offset": "2", "limit": "2"}), None)

        assert msg.content[0]["text"] == "2\n3\n\n[1 more lines in file. Use offset=4 to continue.]"

    @pytest.mark.asyncio
    async def test_missing_file_is_error_result(self):
        mw, _ = _middleware()

        msg = await mw.awrap_tool_call(_call("read", {"path": "nope.txt"}), None)

        assert msg.status == "error"
        assert msg.content.startswith("Error: ")
        assert "nope.txt" in msg.content

    @pytest.mark.asyncio
    async def test_offset_out_of_range_is_error_result(self):
        mw, _ = _middleware({"a.txt": b"x\ny"})

        msg = await mw.awrap_tool_call(_call("read", {"path": "a.txt", "offset": 5}), None)

        assert msg.status == "error"
        assert msg.content == "Error: Offset 5 is beyond end of file (2 lines total)"

    @pytest.mark.asyncio
    async def test_missing_path_argument(self):
        mw, _ = _middleware()

        msg = await mw.awrap_tool_call(_call("read", {}), None)

        assert msg.status == "error"
        assert msg.content == "Error: Parameter 'path' is required."

    @pytest.mark.asyncio
    async def test_other_tools_pass_through(self):
        mw, backend = _middleware()
        request = _call("bash", {"command": "ls"})

        async def handler(req):
            return "handled"

        assert await mw.awrap_tool_call(request, handler) == "handled"
        assert backend.calls == []

    def test_sync_path(self):
        mw, _ = _middleware({"a.txt": b"sync"})

        msg = mw.wrap_tool_call(_call("read", {"path": "a.txt"}), lambda r: None)

        assert msg.content == [{"type": "text", "text": "sync"}]

    def test_sync_pass_through(self):
        mw, _ = _middleware()
        assert mw.wrap_tool_call(_call("write", {}), lambda r: "w") == "w"


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_inflight_read(self):
        mw, backend = _middleware({"a.txt": b"slow"})
        backend.read_gate = asyncio.Event()

        task = asyncio.create_task(mw.awrap_tool_call(_call("read", {"path": "a.txt"}, "call_9"), None))
        while not any(op == "read_file" for op, _ in backend.calls):
            await asyncio.sleep(0)

        mw.cancel("call_9")

        with pytest.raises(asyncio.CancelledError):
            await task
        assert mw._inflight == {}

    @pytest.mark.asyncio
    async def test_cancel_unknown_id_is_noop(self):
        mw, _ = _middleware({"a.txt": b"ok"})
        mw.cancel("does-not-exist")

        msg = await mw.awrap_tool_call(_call("read", {"path": "a.txt"}), None)

        assert msg.content[0]["text"] == "ok"

    @pytest.mark.asyncio
    async def test_calls_without_id_tracked_separately(self):
        mw, backend = _middleware({"a.txt": b"one", "b.txt": b"two"})
        backend.read_gate = asyncio.Event()

        first = asyncio.create_task(mw.awrap_tool_call(_call("read", {"path": "a.txt"}, None), None))
        second = asyncio.create_task(mw.awrap_tool_call(_call("read", {"path": "b.txt"}, ""), None))
        while sum(op == "read_file" for op, _ in backend.calls) < 2:
            await asyncio.sleep(0)

        assert len(mw._inflight) == 2
        mw.cancel()

        for task in (first, second):
            with pytest.raises(asyncio.CancelledError):
                await task
        assert mw._inflight == {}


class SlowBackend(MemoryBackend):
    """read_file takes far longer than any test should wait."""

    async def read_file(self, path: str) -> bytes:
        self.calls.append(("read_file", path))
        await asyncio.sleep(5)
        return self.files[path]


class TestSyncCancel:
    def test_cancel_from_another_thread_interrupts_read(self):
        backend = SlowBackend({f"{CWD}/slow.txt": b"data"})
        mw = ReadFileMiddleware(CWD, operations=backend)
        timer = threading.Timer(0.2, mw.cancel, args=("call_slow",))

        timer.start()
        started = time.monotonic()
        try:
            with pytest.raises(asyncio.CancelledError):
                mw.wrap_tool_call(_call("read", {"path": "slow.txt"}, "call_slow"), lambda r: None)
        finally:
            timer.cancel()
        elapsed = time.monotonic() - started

        assert elapsed < 2.0
        assert ("read_file", f"{CWD}/slow.txt") in backend.calls
        assert mw._inflight == {}
