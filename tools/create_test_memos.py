import sys
import os
import random
import subprocess

from memopad.core.store import MemoStore

def get_fortune_text():
    """Get random text from fortune command, with fallback if not available."""
    try:
        result = subprocess.run(['fortune', '-s'], capture_output=True, text=True, timeout=5)
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    except (subprocess.SubprocessError, FileNotFoundError):
        pass

    fallback_texts = [
        "The early bird catches the worm.",
        "A journey of a thousand miles begins with a single step.",
        "The pen is mightier than the sword.",
        "Actions speak louder than words.",
        "Better late than never.",
        "Every cloud has a silver lining.",
        "Fortune favors the bold.",
        "Knowledge is power.",
        "Practice makes perfect.",
        "Rome wasn't built in a day.",
        "You can't judge a book by its cover.",
        "A picture is worth a thousand words.",
        "Great minds think alike.",
        "Hope for the best, prepare for the worst.",
    ]
    return random.choice(fallback_texts)

def main():
    if len(sys.argv) != 3:
        print(f"Usage: {sys.argv[0]} /path/to/store N")
        print("Note: Install 'fortune' command for better random text (apt install fortune-mod or brew install fortune)")
        sys.exit(1)

    store_dir = sys.argv[1]
    count = int(sys.argv[2])

    if not os.path.isdir(store_dir):
        print(f"Error: {store_dir} is not a directory")
        sys.exit(1)

    store = MemoStore.open(store_dir)
    folder_ids = [None]

    for i in range(count):
        parent_id = random.choice(folder_ids)
        if random.random() < 0.2:
            fid = store.create_folder(parent_id)
            store.rename_folder(fid, get_fortune_text().split()[0].strip(".,"))
            folder_ids.append(fid)
        else:
            store.create_note(parent_id)
            text = get_fortune_text()
            store.update_note(title=text[:40], content=text)
        if (i + 1) % 100 == 0:
            print(f"Created {i+1} items...")

    print("Done creating memos" if store.last_save_ok else "Done, but the last save failed")

if __name__ == '__main__':
    main()
