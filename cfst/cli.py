"""Command line interface for cfst."""

import argparse
import logging
import os
import sys

from tqdm import tqdm

from cfst import __version__
from cfst.address_source import load_addresses
from cfst.config import SpeedTestConfig
from cfst.downloader import HttpDownloader
from cfst.fake_network import FakeDownloader, FakePinger
from cfst.logging_config import configure_logging
from cfst.pinger import TcpPinger
from cfst.pipeline import measure_download_speed, probe_latency
from cfst.results import export_csv
from cfst.ui.console import print_results
from cfst.update import UpdateChecker

logger = logging.getLogger(__name__)

PROJECT_URL = "https://github.com/XIU2/CloudflareSpeedTest"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the classic single-dash flags."""
    defaults = SpeedTestConfig()
    parser = argparse.ArgumentParser(
        prog="cfst",
        description="测试 Cloudflare CDN 所有 IP 的延迟和速度，获取最快 IP (IPv4+IPv6)！",
        epilog=PROJECT_URL,
        allow_abbrev=False,
    )
    parser.add_argument(
        "-n", dest="routines", type=int, default=defaults.routines,
        help="测速线程数量；性能弱的设备 (如路由器) 请勿太高 (默认 200 最多 1000)",
    )
    parser.add_argument(
        "-t", dest="ping_times", type=int, default=defaults.ping_times,
        help="延迟测速次数；单个 IP 延迟测速次数，为 1 时将过滤丢包的 IP (默认 4)",
    )
    parser.add_argument(
        "-tp", dest="tcp_port", type=int, default=defaults.tcp_port,
        help="延迟测速端口 (默认 443)",
    )
    parser.add_argument(
        "-dn", dest="test_count", type=int, default=defaults.test_count,
        help="下载测速数量；延迟测速并排序后，从最低延迟起下载测速的数量 (默认 20)",
    )
    parser.add_argument(
        "-dt", dest="download_time", type=float, default=defaults.download_time,
        help="下载测速时间；单个 IP 下载测速最长时间，单位：秒 (默认 10)",
    )
    parser.add_argument(
        "-url", dest="url", default=defaults.url,
        help="下载测速地址 (默认 %(default)s)",
    )
    parser.add_argument(
        "-tl", dest="max_delay_ms", type=float, default=defaults.max_delay_ms,
        help="平均延迟上限，单位：ms (默认 9999)",
    )
    parser.add_argument(
        "-tll", dest="min_delay_ms", type=float, default=defaults.min_delay_ms,
        help="平均延迟下限，单位：ms (默认 0)",
    )
    parser.add_argument(
        "-sl", dest="min_speed", type=float, default=defaults.min_speed,
        help="下载速度下限，单位：MB/s；凑够 [-dn] 个才会停止测速 (默认 0.00)",
    )
    parser.add_argument(
        "-p", dest="print_num", type=int, default=defaults.print_num,
        help="显示结果数量；为 0 时不显示结果直接退出 (默认 20)",
    )
    parser.add_argument(
        "-f", dest="ip_file", default=defaults.ip_file,
        help="IP 段数据文件 (默认 ip.txt)",
    )
    parser.add_argument(
        "-o", dest="output", default=defaults.output,
        help='写入结果文件；值为空时不写入文件 [-o ""] (默认 result.csv)',
    )
    parser.add_argument(
        "-dd", dest="disable_download", action="store_true",
        help="禁用下载测速；禁用后测速结果会按延迟排序",
    )
    parser.add_argument(
        "-ipv6", dest="ipv6", action="store_true",
        help="IPv6 测速模式；IP 段数据文件内只能包含 IPv6 IP 段",
    )
    parser.add_argument(
        "-allip", dest="test_all", action="store_true",
        help="测速全部的 IP；对 IP 段中的每个 IP (仅支持 IPv4) 进行测速",
    )
    parser.add_argument(
        "-v", dest="print_version", action="store_true",
        help="打印程序版本 + 检查版本更新",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SpeedTestConfig:
    """Build the normalized run configuration from parsed arguments."""
    return SpeedTestConfig(
        routines=args.routines,
        ping_times=args.ping_times,
        tcp_port=args.tcp_port,
        max_delay_ms=args.max_delay_ms,
        min_delay_ms=args.min_delay_ms,
        download_time=args.download_time,
        test_count=args.test_count,
        min_speed=args.min_speed,
        url=args.url,
        disable_download=args.disable_download,
        ipv6=args.ipv6,
        test_all=args.test_all,
        ip_file=args.ip_file,
        output=args.output,
        print_num=args.print_num,
    ).normalized()


def create_collectors():
    """Return (pinger, downloader); CFST_COLLECTOR=fake selects simulated ones."""
    if os.environ.get("CFST_COLLECTOR", "").lower() == "fake":
        logger.info("Using simulated pinger and downloader (CFST_COLLECTOR=fake)")
        return FakePinger(), FakeDownloader()
    return TcpPinger(), HttpDownloader()


def print_version() -> None:
    print(__version__)
    print("检查版本更新中...")
    checker = UpdateChecker(__version__)
    if checker.check():
        print(f"发现新版本 [{checker.new_version}]！请前往 [{PROJECT_URL}] 更新！")
    else:
        print(f"当前为最新版本 [{__version__}]！")


def main(argv=None) -> int:
    """Run one measurement session.

    Returns:
        Process exit status: 0 on success, 1 on configuration errors
    """
    configure_logging()
    args = build_parser().parse_args(argv)

    if args.print_version:
        print_version()
        return 0

    try:
        config = config_from_args(args)
        addresses = load_addresses(config.ip_file, ipv6=config.ipv6, test_all=config.test_all)
    except (OSError, ValueError) as e:
        logger.error("Configuration error: %s", e)
        print(f"[错误] {e}", file=sys.stderr)
        return 1

    checker = UpdateChecker(__version__)
    checker.start()

    pinger, downloader = create_collectors()

    print(f"# XIU2/CloudflareSpeedTest {__version__}\n")
    print(
        f"开始延迟测速（模式：TCP {'IPv6' if config.ipv6 else 'IPv4'}，"
        f"端口：{config.tcp_port}，平均延迟上限：{config.max_delay_ms:g} ms，"
        f"平均延迟下限：{config.min_delay_ms:g} ms）"
    )

    with tqdm(total=len(addresses), unit="IP") as ping_bar:
        results = probe_latency(
            addresses,
            config,
            pinger,
            progress=lambda done, total: ping_bar.update(1),
        )

    if config.disable_download:
        logger.info("Download speed test disabled")
    elif not results:
        print("\n[信息] 延迟测速结果 IP 数量为 0，跳过下载测速。")
    else:
        target = min(config.test_count, len(results))
        queue_size = len(results) if config.min_speed > 0 else target
        print(
            f"\n开始下载测速（下载速度下限：{config.min_speed:.2f} MB/s，"
            f"下载测速数量：{target}，下载测速队列：{queue_size}）"
        )
        with tqdm(total=target, unit="IP") as speed_bar:
            results = measure_download_speed(
                results,
                config,
                downloader,
                progress=lambda satisfying, _: speed_bar.update(satisfying - speed_bar.n),
            )

    try:
        exported = export_csv(results, config.output)
    except OSError as e:
        logger.error("Failed to write %s: %s", config.output, e)
        print(f"[错误] 写入结果文件失败：{e}", file=sys.stderr)
        exported = False
    print_results(results, config.print_num)

    if checker.new_version:
        print(f"\n*** 发现新版本 [{checker.new_version}]！请前往 [{PROJECT_URL}] 更新！ ***")

    if exported:
        print(f"完整测速结果已写入 {config.output} 文件，请使用记事本/表格软件查看。")

    if sys.platform == "win32" and sys.stdin.isatty():
        # Keep the console open when started by double-click
        input("按下 回车键 或 Ctrl+C 退出。\n")

    return 0
