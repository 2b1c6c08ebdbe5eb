"""Simple entrypoint to print a summary of the local closet."""

import json
from dataclasses import asdict

from closet_app.app import SmartClosetApp


def main() -> None:
    with SmartClosetApp() as app:
        print(json.dumps(asdict(app.wardrobe_summary()), indent=2))


if __name__ == "__main__":
    main()
