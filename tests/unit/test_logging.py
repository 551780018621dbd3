"""
输出门面单元测试
"""

import io

from distpack.utils.logging import LogStage, OutputFacade, OutputLevel


class TestOutputFacade:
    """OutputFacade 测试"""

    def _facade(self):
        stdout, stderr = io.StringIO(), io.StringIO()
        return OutputFacade(stdout=stdout, stderr=stderr), stdout, stderr

    def test_info_goes_to_stdout(self):
        facade, stdout, stderr = self._facade()
        facade.info("构建完成", stage=LogStage.BUILD)

        assert "构建完成" in stdout.getvalue()
        assert "BUILD" in stdout.getvalue()
        assert stderr.getvalue() == ""

    def test_error_goes_to_stderr(self):
        facade, stdout, stderr = self._facade()
        facade.error("构建失败")

        assert "构建失败" in stderr.getvalue()
        assert stdout.getvalue() == ""

    def test_debug_hidden_by_default(self):
        """测试默认级别不输出调试信息"""
        facade, stdout, _ = self._facade()
        facade.debug("细节")
        assert stdout.getvalue() == ""

        facade.set_level(OutputLevel.DEBUG)
        facade.debug("细节")
        assert "细节" in stdout.getvalue()

    def test_unknown_level_ignored(self):
        facade, _, _ = self._facade()
        facade.set_level("LOUD")
        assert facade.get_level() == OutputLevel.INFO

    def test_markup_in_message_is_escaped(self):
        """测试消息中的方括号原样输出"""
        facade, stdout, _ = self._facade()
        facade.info("[x86_64-a @ building] failed")
        assert "[x86_64-a @ building] failed" in stdout.getvalue()

    def test_log_file(self, tmp_path):
        """测试写入纯文本日志文件"""
        facade, _, _ = self._facade()
        log_path = tmp_path / "logs" / "distpack.log"
        facade.set_log_file(log_path)
        facade.warning("未找到 zip 工具", stage=LogStage.ARCHIVE)
        facade.close()

        content = log_path.read_text(encoding="utf-8")
        assert "[WARNING] [ARCHIVE] 未找到 zip 工具" in content
