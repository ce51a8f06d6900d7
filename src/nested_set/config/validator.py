"""
配置验证器
"""
from typing import Dict, Any, Mapping

from ..exceptions import ValidationError, ConfigError
from .settings import VALID_LOG_LEVELS


# 重建时必须存在的记录字段
REQUIRED_RECORD_FIELDS = ('tag', 'node_left', 'node_right', 'node_depth')


class ConfigValidator:
    """配置与记录验证器"""

    def validate_system_config(self, config: Dict[str, Any]) -> bool:
        """验证系统配置"""
        try:
            if 'log_level' in config:
                level = config['log_level']
                if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
                    raise ValidationError(
                        message=f"无效的日志级别: {level}",
                        field="log_level",
                        value=level,
                        reason=f"必须是 {VALID_LOG_LEVELS} 之一"
                    )

            if 'root_tag' in config and not self._validate_string(config['root_tag']):
                raise ValidationError(
                    message="根节点标签必须是1-100个字符的字符串",
                    field="root_tag",
                    value=config['root_tag'],
                    reason="invalid_length"
                )

            for flag in ('strict_reconstruction', 'verify_on_flatten', 'verify_after_mutation', 'enable_logging'):
                if flag in config and not isinstance(config[flag], bool):
                    raise ValidationError(
                        message=f"配置项必须是布尔值: {flag}",
                        field=flag,
                        value=config[flag],
                        reason="invalid_type"
                    )

            return True

        except ValidationError:
            raise
        except Exception as e:
            raise ConfigError(f"配置验证失败: {str(e)}")

    def validate_record_dict(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        验证一条扁平记录

        Args:
            data: 记录字典（通常来自存储层）

        Returns:
            数值字段已转换为int的新字典

        Raises:
            ValidationError: 缺少必需字段或区间非法
        """
        for field in REQUIRED_RECORD_FIELDS:
            if data.get(field) is None:
                raise ValidationError(
                    message=f"缺少必需字段: {field}",
                    field=field,
                    reason="required_field_missing"
                )

        if not self._validate_string(str(data['tag'])):
            raise ValidationError(
                message="标签必须是1-100个字符的字符串",
                field="tag",
                value=data['tag'],
                reason="invalid_tag"
            )

        validated = dict(data)
        for field in ('node_left', 'node_right', 'node_depth'):
            validated[field] = self._to_int(field, data[field])

        if validated['node_right'] <= validated['node_left']:
            raise ValidationError(
                message="右值必须大于左值",
                field="node_right",
                value=validated['node_right'],
                reason="invalid_span"
            )

        if validated['node_depth'] < 0:
            raise ValidationError(
                message="深度不能为负数",
                field="node_depth",
                value=validated['node_depth'],
                reason="negative_depth"
            )

        return validated

    def _to_int(self, field: str, value: Any) -> int:
        """把数值字段转换为int，拒绝非整数"""
        if isinstance(value, bool):
            raise ValidationError(
                message=f"字段必须是整数: {field}",
                field=field,
                value=value,
                reason="invalid_type"
            )
        if isinstance(value, int):
            return value
        try:
            as_float = float(value)
        except (TypeError, ValueError):
            raise ValidationError(
                message=f"字段必须是整数: {field}",
                field=field,
                value=value,
                reason="invalid_type"
            )
        if not as_float.is_integer():
            raise ValidationError(
                message=f"字段必须是整数: {field}",
                field=field,
                value=value,
                reason="not_integer"
            )
        return int(as_float)

    def _validate_string(self, value: str, min_len: int = 1, max_len: int = 100) -> bool:
        """验证字符串"""
        return isinstance(value, str) and min_len <= len(value) <= max_len
