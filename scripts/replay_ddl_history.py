#!/usr/bin/env python
"""DDL 히스토리 재생 스크립트.

사용법:
    python scripts/replay_ddl_history.py samples/ddl_jobs.json --accelerate-only   # 엔진 없이 카탈로그만 재구성
    python scripts/replay_ddl_history.py jobs.json                                 # 스크래치 엔진에 반영
    python scripts/replay_ddl_history.py jobs.json --publish                       # 재생 후 카탈로그 스냅샷 적재
    python scripts/replay_ddl_history.py jobs.json --no-accelerate                 # 모든 잡을 엔진에서 실행
"""

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

# 프로젝트 루트 경로 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from pitr.adapters.engine.scratch_engine import DetachedScratchEngine
from pitr.core.config import Settings
from pitr.core.errors import PITRError
from pitr.core.logging import configure_logging
from pitr.core.models import DDLJob
from pitr.ddl.catalog import SchemaCatalog
from pitr.ddl.handle import DDLHandle, ReplayProgress, ReplayResult
from pitr.ddl.job_loader import JsonJobLoader

console = Console()


def print_catalog(catalog: SchemaCatalog) -> None:
    """카탈로그를 테이블로 출력."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("데이터베이스", style="cyan")
    table.add_column("테이블 ID", justify="right")
    table.add_column("테이블", style="yellow")

    for database in catalog:
        if not database.tables:
            table.add_row(database.name, "-", "[dim](없음)[/dim]")
        for definition in database.tables:
            table.add_row(database.name, str(definition.id), definition.name)

    console.print(Panel(table, title="[bold blue]재구성된 카탈로그[/bold blue]", border_style="blue"))


def print_engine_tables(tables: dict[str, list[str]]) -> None:
    """엔진에 만들어진 테이블 목록을 출력."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("데이터베이스", style="cyan")
    table.add_column("테이블", style="yellow")

    for database, names in tables.items():
        table.add_row(database, ", ".join(names) if names else "[dim](없음)[/dim]")

    console.print(Panel(table, title="[bold blue]엔진 테이블[/bold blue]", border_style="blue"))


def print_result_panel(result: ReplayResult) -> None:
    """결과를 패널로 출력."""
    result_table = Table(show_header=False, box=None)
    result_table.add_column("항목", style="cyan")
    result_table.add_column("값", style="yellow")

    result_table.add_row("📥 전체 잡", f"{result.total_count}건")
    result_table.add_row("⏭️  건너뛴 잡", f"{result.skipped_count}건")
    result_table.add_row("⚡ 가속 경로 반영", f"{result.accelerated_count}건")
    result_table.add_row("🛠️  엔진 실행", f"{result.executed_count}건")

    console.print(Panel(result_table, title="[bold blue]DDL 히스토리 재생 결과[/bold blue]", border_style="green"))


def replay_accelerate_only(jobs: list[DDLJob]) -> ReplayResult:
    """엔진 없이 가속 경로만으로 카탈로그를 재구성."""
    handle = DDLHandle(DetachedScratchEngine())
    try:
        result = handle.execute_history_ddls(jobs)
    finally:
        handle.close()

    print_catalog(handle.catalog)
    return result


def replay_with_engine(
    settings: Settings, jobs: list[DDLJob], publish: bool = False
) -> ReplayResult:
    """스크래치 엔진에 접속해 재생."""
    with Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("DDL 재생 중...", total=len(jobs))

        def update_progress(info: ReplayProgress) -> None:
            progress.update(task, completed=info.current, description=f"#{info.job_id} {info.action}")

        handle = DDLHandle.create(settings, progress_callback=update_progress)
        try:
            result = handle.execute_history_ddls(jobs)
            if publish:
                count = handle.shift_meta_to_engine()
                console.print(f"[green]📦 카탈로그 스냅샷 적재:[/green] 데이터베이스 {count}개")
            if handle.accelerate_enable:
                print_catalog(handle.catalog)
            else:
                print_engine_tables(handle.list_engine_tables())
        finally:
            handle.close()

    return result


def main():
    """메인 함수."""
    parser = argparse.ArgumentParser(
        description="DDL 히스토리 재생",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
  python scripts/replay_ddl_history.py samples/ddl_jobs.json --accelerate-only
  python scripts/replay_ddl_history.py jobs.json --publish
        """,
    )
    parser.add_argument("jobs", type=Path, help="DDL 잡 JSON 파일")
    parser.add_argument(
        "--accelerate-only",
        action="store_true",
        help="스크래치 엔진 없이 가속 경로로만 카탈로그 재구성",
    )
    parser.add_argument(
        "--no-accelerate",
        action="store_true",
        help="가속 경로를 끄고 모든 잡을 엔진에서 실행",
    )
    parser.add_argument(
        "--publish",
        action="store_true",
        help="재생 후 카탈로그 스냅샷을 엔진에 적재",
    )

    args = parser.parse_args()

    settings = Settings()
    if args.no_accelerate:
        settings.accelerate_enable = False
    configure_logging(settings)

    if not args.jobs.exists():
        console.print(f"[red]❌ 잡 파일을 찾을 수 없습니다: {args.jobs}[/red]")
        sys.exit(1)

    jobs = JsonJobLoader(args.jobs).load()
    console.print(f"[green]📂 잡 로드:[/green] {args.jobs} ([yellow]{len(jobs)}[/yellow]건)")

    try:
        if args.accelerate_only:
            result = replay_accelerate_only(jobs)
        else:
            result = replay_with_engine(settings, jobs, publish=args.publish)
    except PITRError as e:
        console.print(f"\n[red]❌ 재생 실패: {e}[/red]")
        sys.exit(1)

    print_result_panel(result)


if __name__ == "__main__":
    main()
