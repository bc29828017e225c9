import pytest

from chat_combine.storage.memory import InMemoryStorage


class TestInMemoryStorage:
    def test_write_read(self):
        s = InMemoryStorage()
        s.write("a/b.zip", b"hello")
        assert s.read("a/b.zip") == b"hello"

    def test_write_copies_buffer(self):
        s = InMemoryStorage()
        data = bytearray(b"abc")
        s.write("k", data)
        data[0] = ord("x")
        assert s.read("k") == b"abc"

    def test_missing_key(self):
        with pytest.raises(KeyError):
            InMemoryStorage().read("missing")

    def test_delete(self):
        s = InMemoryStorage()
        s.write("a", b"1")
        s.write("b", b"2")
        s.delete("a")
        s.delete("never-there")
        with pytest.raises(KeyError):
            s.read("a")
        assert s.read("b") == b"2"
