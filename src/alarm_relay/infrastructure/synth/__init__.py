"""템플릿 합성 모듈"""

from alarm_relay.infrastructure.synth.cloudformation import (
    TemplateSynthesizer,
    synthesize,
    to_json,
    write_template,
)

__all__ = [
    "TemplateSynthesizer",
    "synthesize",
    "to_json",
    "write_template",
]
