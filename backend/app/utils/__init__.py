"""
通用工具模块包
提供项目通用的工具函数和辅助类
"""

from .config_utils import (
    get_project_root,
    get_workspace_path,
    parse_list_config,
    parse_json_config
)

from .id_utils import (
    ILLUSTRATION_PREFIX,
    BATCH_ILLUSTRATION_PREFIX,
    ADVANCED_ILLUSTRATION_PREFIX,
    generate_random_suffix,
    build_image_filename,
    extract_filename_timestamp
)

from .file_utils import (
    get_file_extension,
    get_mime_type,
    resolve_within_directory
)

__all__ = [
    # config_utils
    'get_project_root', 'get_workspace_path', 'parse_list_config', 'parse_json_config',

    # id_utils
    'ILLUSTRATION_PREFIX', 'BATCH_ILLUSTRATION_PREFIX', 'ADVANCED_ILLUSTRATION_PREFIX',
    'generate_random_suffix', 'build_image_filename', 'extract_filename_timestamp',

    # file_utils
    'get_file_extension', 'get_mime_type', 'resolve_within_directory'
]
