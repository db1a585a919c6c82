import logging
import sys
import os
import webbrowser


# 将日志配置移到这里，作为一个可被调用的函数
def setup_logging():
    """配置全局日志 (-v 由 CLI 在解析参数后调高根日志级别)"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def open_report_in_browser(filename: str):
    """在浏览器中打开报告"""
    logger = logging.getLogger(__name__)
    try:
        webbrowser.open(f"file://{os.path.abspath(filename)}")
        logger.info(f"🌐 已在浏览器中打开报告: {filename}")
    except webbrowser.Error as e:
        logger.warning(f"无法自动打开报告，请手动打开: {filename}, 错误: {e}")
