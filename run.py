#!/usr/bin/env python3
"""
Lambda Field 快速启动脚本 (跨平台)

使用方法:
  python run.py                          # 使用默认配置
  python run.py --range 5000             # 扫描 1..5000
  python run.py --ticks 3 --interval 1   # 每秒重算一次, 共3次
  python run.py --forever                # 持续运行直到 Ctrl+C
  python run.py --help                   # 显示帮助
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path


def create_temp_config(args):
    """创建临时配置文件"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_id = args.run_id or f"lambda_field_{args.range}_{timestamp}"

    max_ticks_line = "null" if args.forever else str(args.ticks)
    plots = "false" if args.no_plots else "true"

    config_content = f"""run_id: "{run_id}"
seed: {args.seed}

max_range: {args.range}
base_lambda: {args.base_lambda}
tunnel_steps: {args.tunnel_steps}

prime_interval_s: {args.interval}
max_prime_ticks: {max_ticks_line}

crystal_interval_s: 0.05
crystal_samples: {args.crystal_samples}

artifact_dir: "artifacts"
generate_plots: {plots}
generate_report: true
log_level: "{args.log_level}"
"""

    config_path = Path("configs") / "temp_run.yaml"
    config_path.parent.mkdir(exist_ok=True)
    config_path.write_text(config_content, encoding="utf-8")

    return config_path, run_id


def print_banner():
    """打印启动横幅"""
    print()
    print("╔══════════════════════════════════════════════════════════════════╗")
    print("║         🔢 Lambda Field - Prime Field & Tunnel Depth 🔢          ║")
    print("╚══════════════════════════════════════════════════════════════════╝")
    print()


def print_config(args, run_id):
    """打印配置信息"""
    print("📋 运行配置:")
    print(f"   Run ID:      {run_id}")
    print(f"   数值范围:    1..{args.range}")
    print(f"   基础 λ:      {args.base_lambda}")
    print(f"   隧道步数:    {args.tunnel_steps}")
    print(f"   随机种子:    {args.seed}")
    ticks = "∞ (Ctrl+C 停止)" if args.forever else args.ticks
    print(f"   重算次数:    {ticks}")
    print(f"   重算间隔:    {args.interval}s")
    print(f"   时间晶体:    {args.crystal_samples if args.crystal_samples else '关闭'}")
    print(f"   绘图:        {'关闭' if args.no_plots else '开启'}")
    print()


def main():
    parser = argparse.ArgumentParser(
        description="Lambda Field 快速启动脚本",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  python run.py                              # 默认配置 (1..1000, 1次)
  python run.py --range 200 --no-plots       # 小范围快速运行
  python run.py --ticks 5 --interval 2       # 每2秒重算, 共5次
  python run.py --crystal-samples 200        # 同时采样时间晶体
"""
    )

    parser.add_argument(
        "--range", "-n",
        type=int,
        default=1000,
        help="素数场扫描上限 N (默认: 1000)"
    )
    parser.add_argument(
        "--base-lambda",
        type=float,
        default=0.99999999999,
        help="基础 λ 值 (默认: 0.99999999999)"
    )
    parser.add_argument(
        "--tunnel-steps",
        type=int,
        default=100,
        help="隧道深度步数 (默认: 100)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="随机种子, 用于量子涨落 (默认: 42)"
    )
    parser.add_argument(
        "--ticks", "-t",
        type=int,
        default=1,
        help="素数场重算次数 (默认: 1)"
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=5.0,
        help="两次重算之间的间隔秒数 (默认: 5.0)"
    )
    parser.add_argument(
        "--forever",
        action="store_true",
        help="持续重算直到 Ctrl+C"
    )
    parser.add_argument(
        "--crystal-samples",
        type=int,
        default=0,
        help="时间晶体采样数, 0 表示关闭 (默认: 0)"
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="跳过绘图"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="日志级别 (默认: INFO)"
    )
    parser.add_argument(
        "--run-id", "-r",
        type=str,
        default="",
        help="运行标识 (默认: 自动生成)"
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="跳过确认直接开始"
    )

    args = parser.parse_args()

    print_banner()

    if args.range < 1 or args.ticks < 1 or args.tunnel_steps < 1:
        print("❌ 错误: --range, --ticks 和 --tunnel-steps 必须 >= 1")
        sys.exit(1)

    # 创建配置文件
    config_path, run_id = create_temp_config(args)

    # 显示配置
    print_config(args, run_id)

    # 确认
    if not args.yes:
        try:
            response = input("按 Enter 开始运行，或输入 'q' 取消: ")
            if response.lower() == 'q':
                print("已取消")
                sys.exit(0)
        except KeyboardInterrupt:
            print("\n已取消")
            sys.exit(0)

    print("🚀 启动运行...")
    print()

    from experiments import configure_logging
    from experiments.config import load_config
    from experiments.runner import ExperimentRunner

    try:
        config = load_config(str(config_path))
        configure_logging(config.log_level)
        runner = ExperimentRunner(config)
        summary = runner.run()

        if summary.get("status") == "completed":
            print("\n✅ 运行成功完成!")
        else:
            print("\n⚠️  运行未完成")
    except Exception as e:
        print(f"\n❌ 运行出错: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    print()
    print(f"✅ 运行完成! 结果保存在: {config.artifact_dir}/{run_id}/")


if __name__ == "__main__":
    main()
