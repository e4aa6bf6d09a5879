from dataclasses import dataclass


@dataclass(frozen=True)
class DecoderConfig:
    text_encoding: str = 'latin-1'   # codec for text meta events
    text_errors: str = 'replace'
    # SysEx always clears running status; this covers meta events
    reset_running_status_after_meta: bool = True
