"""Business metrics for the RIM Agent Host.

Defines OpenTelemetry metrics for:
- LLM: Completion requests, latency and failures
- Actions: Resolution, execution and failures
- RIM: Requests and stream durations
"""

from opentelemetry import metrics

meter = metrics.get_meter("rim_host")

# =============================================================================
# LLM METRICS
# =============================================================================

llm_request_count = meter.create_counter(
    name="rim_host.llm.request_count",
    description="Total completion requests sent to providers",
    unit="1",
)

llm_request_time = meter.create_histogram(
    name="rim_host.llm.request_time",
    description="Time until a provider answered (headers for streams, body otherwise)",
    unit="ms",
)

llm_request_errors = meter.create_counter(
    name="rim_host.llm.request_errors",
    description="Completion requests rejected by or failing to reach a provider",
    unit="1",
)

# =============================================================================
# ACTION METRICS
# =============================================================================

actions_resolved = meter.create_counter(
    name="rim_host.actions.resolved",
    description="Total domain actions selected by the classifier",
    unit="1",
)

action_execution_count = meter.create_counter(
    name="rim_host.actions.execution_count",
    description="Total action handler invocations",
    unit="1",
)

action_execution_time = meter.create_histogram(
    name="rim_host.actions.execution_time",
    description="Time to execute one action handler",
    unit="ms",
)

action_execution_errors = meter.create_counter(
    name="rim_host.actions.execution_errors",
    description="Action handler failures (recovered and skipped)",
    unit="1",
)

# =============================================================================
# RIM METRICS
# =============================================================================

rim_requests = meter.create_counter(
    name="rim_host.rim.requests",
    description="Total RIM requests received",
    unit="1",
)

rim_stream_duration = meter.create_histogram(
    name="rim_host.rim.stream_duration",
    description="Duration of a RIM response stream from first event to close",
    unit="ms",
)

rim_stream_errors = meter.create_counter(
    name="rim_host.rim.stream_errors",
    description="RIM streams terminated with an in-band error event",
    unit="1",
)
