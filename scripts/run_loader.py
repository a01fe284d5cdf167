import asyncio
import json
import sys
from pathlib import Path
# Ensure project root is on sys.path so 'prioritizer' can be imported when running this script directly
sys.path.append(str(Path(__file__).resolve().parents[1]))
from prioritizer.core.data_loader import TaskLoader


async def main():
    headers = {"Authorization": sys.argv[1]} if len(sys.argv) > 1 else None
    loader = TaskLoader(incoming_headers=headers)
    tasks = await loader.fetch_open_tasks()
    print("OPEN TASKS:")
    print(json.dumps(tasks, indent=2, default=str))


if __name__ == "__main__":
    asyncio.run(main())
