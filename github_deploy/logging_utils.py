import logging
import sys


def setup_logging(verbosity: int = 0, *, quiet: bool = False) -> None:
    """
    -v 가 한 번 이상이면 DEBUG, --quiet 이면 WARNING 이상만 출력한다.
    git/gh 출력은 stdout 으로 그대로 흐르므로 로그도 stdout 에 맞춘다.
    """
    if quiet:
        level = logging.WARNING
    elif verbosity >= 1:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )

    # requests 내부 커넥션 로그는 -vv 부터
    if verbosity < 2:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
