"""Точка входа в приложение."""
import sys

from photoshrink.app import PhotoShrinkApp


def main() -> None:
    """Разбирает аргументы командной строки и запускает обработку."""
    sys.exit(PhotoShrinkApp().run())


if __name__ == "__main__":
    main()
