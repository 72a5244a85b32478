"""
CLI entry point. Parses args and delegates to pipeline.
"""

import sys
from pathlib import Path
from typing import Optional

from .cli import parse_args
from .pipeline import run_pipeline
from .schema import Result


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)

    def run_renderers(result: Result, output_dir: Path) -> None:
        from .renderers import run_all

        run_all(
            result,
            output_dir,
            formats=args.formats,
            theme=args.theme,
            template_path=args.template_path,
        )

    try:
        run_pipeline(
            result_path=args.result,
            output_dir=args.output_dir,
            run_renderers=run_renderers,
        )
        for name in args.formats:
            print(f"Wrote {args.output_dir / f'report.{name}'}", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
