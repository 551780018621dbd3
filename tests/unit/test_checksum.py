"""
校验和单元测试
"""

import hashlib
import shutil
import subprocess

import pytest

from distpack.build.checksum import (
    SHA256SUM_CONVENTION,
    SHASUM_CONVENTION,
    HashCalculator,
    format_record,
    parse_checksum_record,
    select_convention,
    verify_dist,
    write_checksum_record,
)
from distpack.config.schema import ChecksumTool


class TestHashCalculator:
    """哈希计算器测试"""

    def test_hash_data(self):
        assert HashCalculator.hash_data(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_hash_file_in_chunks(self, tmp_path):
        """测试分块读取与一次性计算一致"""
        data = bytes(range(256)) * 1000
        path = tmp_path / "blob"
        path.write_bytes(data)

        calculator = HashCalculator()
        calculator.update_from_file(path, chunk_size=1000)
        assert calculator.hexdigest() == hashlib.sha256(data).hexdigest()

    def test_unsupported_algorithm(self):
        with pytest.raises(ValueError):
            HashCalculator("not-a-hash")


class TestConventions:
    """校验文件约定测试"""

    def test_explicit_tools(self):
        assert select_convention(ChecksumTool.SHA256SUM) is SHA256SUM_CONVENTION
        assert select_convention(ChecksumTool.SHASUM) is SHASUM_CONVENTION

    def test_auto_prefers_sha256sum(self, monkeypatch):
        """测试 auto 时有 sha256sum 就用 .sha256sum"""
        monkeypatch.setattr(shutil, "which", lambda name: "/usr/bin/sha256sum")
        assert select_convention().extension == "sha256sum"

    def test_auto_falls_back_to_shasum(self, monkeypatch):
        """测试没有 sha256sum 时使用 .sha256"""
        monkeypatch.setattr(shutil, "which", lambda name: None)
        assert select_convention().extension == "sha256"

    def test_record_path(self, tmp_path):
        path = SHASUM_CONVENTION.record_path(tmp_path, "Widget_v1_x.zip")
        assert path == tmp_path / "Widget_v1_x.zip.sha256"


class TestChecksumRecord:
    """校验文件读写测试"""

    def test_format_record(self):
        """测试两空格分隔、只含文件名"""
        digest = "a" * 64
        assert format_record(digest, "W_v1_x.tar.gz") == f"{digest}  W_v1_x.tar.gz\n"

    def test_write_record(self, tmp_path):
        """测试写入的记录引用归档文件名而非路径"""
        archive = tmp_path / "work" / "Widget_v0.4.1_x86_64-a.tar.gz"
        archive.parent.mkdir()
        archive.write_bytes(b"archive bytes")
        dist = tmp_path / "dist"
        dist.mkdir()

        digest, record = write_checksum_record(archive, dist, SHA256SUM_CONVENTION)

        assert digest == hashlib.sha256(b"archive bytes").hexdigest()
        assert record == dist / "Widget_v0.4.1_x86_64-a.tar.gz.sha256sum"
        assert record.read_text(encoding="utf-8") == f"{digest}  Widget_v0.4.1_x86_64-a.tar.gz\n"

    def test_failed_write_keeps_existing_record(self, tmp_path, monkeypatch):
        """测试摘要计算失败时已有的校验文件保持不变"""
        archive = tmp_path / "a.tar.gz"
        archive.write_bytes(b"old")
        _, record = write_checksum_record(archive, tmp_path, SHA256SUM_CONVENTION)
        original = record.read_text(encoding="utf-8")

        def unreadable(cls, file_path, algorithm="sha256"):
            raise OSError("read error")

        monkeypatch.setattr(HashCalculator, "hash_file", classmethod(unreadable))
        with pytest.raises(OSError):
            write_checksum_record(archive, tmp_path, SHA256SUM_CONVENTION)

        assert record.read_text(encoding="utf-8") == original
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.tar.gz", "a.tar.gz.sha256sum"]

    def test_parse_binary_mode(self, tmp_path):
        """测试解析二进制模式的记录"""
        record = tmp_path / "a.sha256"
        record.write_text(f"{'B' * 64} *a.zip\n", encoding="utf-8")
        assert parse_checksum_record(record) == {"a.zip": "b" * 64}

    def test_parse_invalid(self, tmp_path):
        record = tmp_path / "a.sha256"
        record.write_text("nothex  a.zip\n", encoding="utf-8")
        with pytest.raises(ValueError):
            parse_checksum_record(record)

    @pytest.mark.skipif(shutil.which("sha256sum") is None, reason="系统没有 sha256sum")
    def test_sha256sum_accepts_record(self, tmp_path):
        """测试 sha256sum -c 可以直接校验"""
        archive = tmp_path / "Widget_v1_x.tar.gz"
        archive.write_bytes(b"payload")
        _, record = write_checksum_record(archive, tmp_path, SHA256SUM_CONVENTION)

        result = subprocess.run(["sha256sum", "-c", record.name], cwd=str(tmp_path),
                                capture_output=True, text=True)
        assert result.returncode == 0

    @pytest.mark.skipif(shutil.which("shasum") is None, reason="系统没有 shasum")
    def test_shasum_accepts_record(self, tmp_path):
        """测试 shasum -a 256 -c 可以直接校验"""
        archive = tmp_path / "Widget_v1_x.zip"
        archive.write_bytes(b"payload")
        _, record = write_checksum_record(archive, tmp_path, SHASUM_CONVENTION)

        result = subprocess.run(["shasum", "-a", "256", "-c", record.name], cwd=str(tmp_path),
                                capture_output=True, text=True)
        assert result.returncode == 0


class TestVerifyDist:
    """输出目录校验测试"""

    def _publish(self, dist, name, data):
        archive = dist / name
        archive.write_bytes(data)
        write_checksum_record(archive, dist, SHA256SUM_CONVENTION)
        return archive

    def test_valid(self, tmp_path):
        self._publish(tmp_path, "a.tar.gz", b"a")
        self._publish(tmp_path, "b.tar.gz", b"b")

        result = verify_dist(tmp_path)
        assert result.is_valid
        assert sorted(result.checked) == ["a.tar.gz", "b.tar.gz"]

    def test_mismatch(self, tmp_path):
        """测试归档被篡改"""
        archive = self._publish(tmp_path, "a.tar.gz", b"a")
        archive.write_bytes(b"tampered")

        result = verify_dist(tmp_path)
        assert not result.is_valid
        assert result.mismatches == ["a.tar.gz"]

    def test_missing_archive(self, tmp_path):
        archive = self._publish(tmp_path, "a.tar.gz", b"a")
        archive.unlink()

        result = verify_dist(tmp_path)
        assert result.missing_files == ["a.tar.gz"]

    def test_unreadable_archive(self, tmp_path, monkeypatch):
        """测试归档无法读取时记录错误而不是抛出异常"""
        self._publish(tmp_path, "a.tar.gz", b"a")

        def unreadable(cls, file_path, algorithm="sha256"):
            raise PermissionError(13, "Permission denied", str(file_path))

        monkeypatch.setattr(HashCalculator, "hash_file", classmethod(unreadable))
        result = verify_dist(tmp_path)

        assert not result.is_valid
        assert result.checked == []
        assert len(result.errors) == 1
        assert "a.tar.gz" in result.errors[0]

    def test_no_records(self, tmp_path):
        """测试空目录"""
        result = verify_dist(tmp_path)
        assert not result.is_valid
        assert result.errors

    def test_missing_dir(self, tmp_path):
        assert not verify_dist(tmp_path / "missing").is_valid
