#!/usr/bin/env python3
"""Open an analysis session from a deep link and export every tab to CSV.

Usage:
    python scripts/export_datasets.py "https://host/analysis?indicator=NFP&market=VIX" [download_dir]

The API base URL comes from config/client.yaml or SURPRISE_API_URL; when both
are empty the deep link's origin is used.
"""

import asyncio
import sys
from pathlib import Path

from surprise_app.config.loader import load_config
from surprise_app.logging.config import configure_logging
from surprise_app.session import AnalysisSession
from surprise_app.views.dispatcher import TabPresentation
from surprise_app.views.tabs import ChartTab


async def run(page_url: str, download_dir: Path) -> int:
    config = load_config()
    configure_logging(level=config.logging.level, format_json=config.logging.format_json)

    async with AnalysisSession(config=config, page_url=page_url, download_dir=download_dir) as session:
        await session.wait_settled()

        params = session.params
        print(f"\n📊 {params.indicator} → {params.market} ({params.horizon})")
        for card in session.stat_cards():
            print(f"  • {card.label}: {card.value} ({card.sub})")

        exported = 0
        for tab in ChartTab:
            view = session.render(tab)
            if view.presentation != TabPresentation.CHART_READY:
                status = "failed" if view.degraded else "no data"
                print(f"\n❌ {view.label}: {status}")
                continue

            print(f"\n✅ {view.label}: {view.narrative.title}")
            path = session.export_tab(tab)
            if path is not None:
                print(f"   saved {path}")
                exported += 1

    return 0 if exported else 1


def main() -> int:
    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    page_url = sys.argv[1]
    download_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else Path("downloads")
    return asyncio.run(run(page_url, download_dir))


if __name__ == "__main__":
    sys.exit(main())
