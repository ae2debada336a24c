"""
Shared test data and async helpers.
"""

import gzip
from typing import AsyncIterator, Iterable

# Sample ALB line from the AWS documentation (HTTP entry)
ALB_LINE = (
    'http 2024-01-15T23:39:43.945958Z app/my-loadbalancer/50dc6c495c0c9188 '
    '192.168.131.39:2817 10.0.0.1:80 0.000 0.001 0.000 200 200 34 366 '
    '"GET http://www.example.com:80/ HTTP/1.1" "curl/7.46.0" - - '
    'arn:aws:elasticloadbalancing:us-east-2:123456789012:targetgroup/my-targets/73e2d6bc24d8a067 '
    '"Root=1-58337262-36d228ad5d99923122bbe354" "-" "-" '
    '0 2024-01-15T23:39:43.945000Z "forward" "-" "-" "10.0.0.1:80" "200" "-" "-" '
    "TID_1234abcd"
)

CDN_FIELDS = [
    "2024-01-15",
    "12:30:45",
    "IAD89-C1",
    "1045",
    "192.0.2.100",
    "GET",
    "d111111abcdef8.cloudfront.net",
    "/images/cat%20photo.jpg",
    "200",
    "https://www.example.com/",
    "Mozilla/5.0%20(Windows%20NT%2010.0)",
    "size=large",
    "-",
    "Hit",
    "SOX4xwn4XV6Q4rgb7XiVGOHms_BGlTAC4KyHmureZmBNrjGdRLiNIQ==",
    "d111111abcdef8.cloudfront.net",
    "https",
    "23",
    "0.001",
    "-",
    "TLSv1.3",
    "TLS_AES_128_GCM_SHA256",
    "Hit",
    "HTTP/2.0",
    "-",
    "-",
    "11040",
    "0.001",
    "Hit",
    "image/jpeg",
    "1045",
    "-",
    "-",
]
CDN_LINE = "\t".join(CDN_FIELDS)


async def agen(items: Iterable) -> AsyncIterator:
    """Turn a plain iterable into an async iterator."""
    for item in items:
        yield item


async def collect(aiterable) -> list:
    """Drain an async iterable into a list."""
    return [item async for item in aiterable]


def chunked(data: bytes, size: int) -> list[bytes]:
    """Split bytes into fixed-size chunks."""
    return [data[i : i + size] for i in range(0, len(data), size)]


def gzip_lines(lines: Iterable[str], trailing_newline: bool = True) -> bytes:
    """Gzip log lines joined by newlines."""
    text = "\n".join(lines)
    if trailing_newline:
        text += "\n"
    return gzip.compress(text.encode("utf-8"))
