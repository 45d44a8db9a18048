"""
日志消息模板模块
统一管理所有业务日志消息模板，便于维护和国际化
"""

from typing import Dict, Any


class LogMessages:
    """日志消息模板类"""

    # ==================== 通用日志消息 ====================
    START_OPERATION = "开始执行操作: {operation_name}"
    OPERATION_SUCCESS = "操作成功完成: {operation_name}"
    OPERATION_FAILED = "操作执行失败: {operation_name}"

    # ==================== 插画流水线 ====================
    PAGE_STAGE_CHANGED = "第{page_number}页插画状态: {stage}"
    ILLUSTRATION_START = "开始生成插画"
    ILLUSTRATION_SUCCESS = "插画生成成功"
    ILLUSTRATION_NO_IMAGE = "模型响应中未找到图片"
    ILLUSTRATION_FAILED = "插画生成失败"

    # ==================== 批量生成 ====================
    BATCH_START = "开始批量生成插画: 共{total_pages}页，每批{batch_size}页"
    BATCH_CHUNK_START = "处理第{chunk_number}/{total_chunks}批（第{first_page}-{last_page}页）"
    BATCH_COMPLETED = "批量插画完成: 成功{successful}页，失败{failed}页"

    # ==================== 存储相关 ====================
    STORAGE_PRIMARY_FAILED = "主存储写入失败，回退到备用存储"
    STORAGE_FALLBACK_FAILED = "备用存储写入失败"
    STORAGE_SAVED = "图片已保存"

    # ==================== 图片清理 ====================
    CLEANUP_COMPLETED = "本地图片清理完成: 删除{deleted}张，保留{kept}张"

    @classmethod
    def format_message(cls, message_template: str, **kwargs: Any) -> str:
        """格式化日志消息模板"""
        return message_template.format(**kwargs)

    @classmethod
    def get_structured_data(cls, **kwargs: Any) -> Dict[str, Any]:
        """获取结构化日志数据"""
        return kwargs


# 全局实例
log_messages = LogMessages()
