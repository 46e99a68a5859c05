from .platforms import Platform, extract_video_urls, get_platform_from_url
from .backoff import next_poll_delay
from .clients import PipelineClients
