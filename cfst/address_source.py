"""Load candidate addresses from a file of IP ranges."""

import ipaddress
import logging
import random

logger = logging.getLogger(__name__)


def parse_range(line: str) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
    """Parse one CIDR range; a bare address is a single-address range."""
    return ipaddress.ip_network(line, strict=False)


def expand_range(network, test_all: bool, rng: random.Random) -> list[str]:
    """Return one random address of network, or every address when test_all is set."""
    if test_all:
        return [str(address) for address in network]
    return [str(network[rng.randrange(network.num_addresses)])]


def load_addresses(
    path: str,
    ipv6: bool = False,
    test_all: bool = False,
    rng: random.Random | None = None,
) -> list[str]:
    """Read IP ranges from path and expand them into candidate addresses.

    One range per line. Blank lines and ``#`` comments are skipped, as are
    lines that do not parse and ranges of the other address family.

    Args:
        path: IP range file
        ipv6: Expect IPv6 ranges instead of IPv4
        test_all: Expand every address of each range (IPv4 only)
        rng: Random source for picking addresses

    Returns:
        Candidate addresses in file order

    Raises:
        OSError: path is missing or unreadable
        ValueError: the file yields no usable address
    """
    rng = rng or random.Random()
    version = 6 if ipv6 else 4
    if test_all and ipv6:
        logger.warning("Testing every address is only supported for IPv4, ignoring")
        test_all = False

    addresses = []
    with open(path, encoding="utf-8-sig") as f:
        for line_no, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            try:
                network = parse_range(line)
            except ValueError:
                logger.warning("Skipping invalid range at %s:%d: %r", path, line_no, line)
                continue
            if network.version != version:
                logger.warning(
                    "Skipping IPv%d range at %s:%d in IPv%d mode",
                    network.version,
                    path,
                    line_no,
                    version,
                )
                continue
            addresses.extend(expand_range(network, test_all, rng))

    if not addresses:
        raise ValueError(f"No usable IPv{version} ranges in {path}")

    logger.info("Loaded %d candidate addresses from %s", len(addresses), path)
    return addresses
