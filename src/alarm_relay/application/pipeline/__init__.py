"""파이프라인 구성 모듈"""

from alarm_relay.application.pipeline.composer import (
    TRANSFORM_SQS_BODY,
    TRANSFORM_SQS_BODY_SNS_RAW,
    TRANSFORM_SQS_BODY_TO_DATA,
    ForwardingPipeline,
    PipelineComposer,
)

__all__ = [
    "TRANSFORM_SQS_BODY",
    "TRANSFORM_SQS_BODY_SNS_RAW",
    "TRANSFORM_SQS_BODY_TO_DATA",
    "ForwardingPipeline",
    "PipelineComposer",
]
