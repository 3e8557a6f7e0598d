from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .booklet import BookletRenderer
from .catalog import CatalogStore, filter_works, new_work
from .config import EngineConfig, load_config
from .curriculum import CurriculumIndex, load_curriculum
from .errors import EmptyCatalogError, IkebanaStudioError
from .exporter import export_progress_csv, export_progress_json
from .images import ImageLoader
from .output import create_output_dirs, record_error
from .progress import summarize
from .share_card import ShareCardRenderer
from .writer import ArtifactWriter


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--catalog", required=True, help="Catalog JSON file (works.json)")
    p.add_argument("--config", default=None, help="Config path (JSON); built-in defaults when omitted")
    p.add_argument("--curriculum", default=None, help="Curriculum JSON; bundled table when omitted")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ikebana_studio")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    booklet = sub.add_parser("booklet", help="Generate the PDF booklet (one page per completed study)")
    _add_common(booklet)
    booklet.add_argument("--out", required=True, help="Output directory")
    booklet.add_argument("--author-fallback", default=None, help="Cover author when the catalog has none")
    booklet.add_argument("--preview", action="store_true", help="Also rasterise pages to PNG (needs pymupdf)")

    card = sub.add_parser("share-card", help="Render the shareable image for one work")
    _add_common(card)
    card.add_argument("--work-id", required=True)
    card.add_argument("--out", required=True, help="Output directory")

    progress = sub.add_parser("progress", help="Show or export progress per graduation")
    _add_common(progress)
    progress.add_argument("--format", default="text", choices=["text", "json", "csv"])
    progress.add_argument("--out", default=None, help="Output file (json/csv)")

    add = sub.add_parser("add", help="Catalog a new study")
    _add_common(add)
    add.add_argument("--image", required=True, help="Image path, relative to the catalog file or absolute")
    add.add_argument("--curriculum-id", required=True, type=int)
    add.add_argument("--author", required=True)
    add.add_argument("--title", default="", help="Custom title (optional)")
    add.add_argument("--variety", default="N/A", choices=["Moribana", "Nageire", "N/A"])

    fav = sub.add_parser("favorite", help="Toggle the favourite flag of a work")
    _add_common(fav)
    fav.add_argument("--work-id", required=True)

    delete = sub.add_parser("delete", help="Delete a work")
    _add_common(delete)
    delete.add_argument("--work-id", required=True)

    ls = sub.add_parser("list", help="List works, newest first")
    _add_common(ls)
    ls.add_argument("--search", default="")
    ls.add_argument("--favorites", action="store_true")

    return p


def _context(args: argparse.Namespace) -> tuple[EngineConfig, CurriculumIndex, CatalogStore]:
    return load_config(args.config), load_curriculum(args.curriculum), CatalogStore(Path(args.catalog))


def cmd_booklet(args: argparse.Namespace) -> int:
    cfg, curriculum, store = _context(args)
    paths = create_output_dirs(args.out)

    renderer = BookletRenderer(
        curriculum=curriculum,
        booklet_cfg=cfg.booklet,
        image_loader=ImageLoader(base_dir=store.base_dir),
    )
    try:
        # Fresh snapshot for every artifact.
        works = store.load()
        pdf_bytes = renderer.render_pdf(works, author_fallback=args.author_fallback)
    except EmptyCatalogError as e:
        print(f"empty_catalog: {e}")
        return 1
    except IkebanaStudioError as e:
        record_error(paths, stage="booklet", message=str(e))
        print(f"booklet_failed: {e}")
        return 1

    writer = ArtifactWriter(paths)
    out = writer.write_booklet(pdf_bytes)
    summary = summarize(curriculum, works, recent_limit=int(cfg.catalog.get("recent_limit", 5)))
    writer.write_summary(summary.to_dict())
    print(str(out))

    if args.preview:
        from .preview import render_pdf_previews

        previews = render_pdf_previews(pdf_bytes, paths.previews_dir)
        print(f"previews={len(previews)}")
    return 0


def cmd_share_card(args: argparse.Namespace) -> int:
    cfg, curriculum, store = _context(args)
    paths = create_output_dirs(args.out)

    try:
        works = store.load()
        if not works:
            raise EmptyCatalogError()
        work = next((w for w in works if w.id == args.work_id), None)
        if work is None:
            raise IkebanaStudioError(f"unknown work id: {args.work_id}")
        renderer = ShareCardRenderer(share_cfg=cfg.share_card, image_loader=ImageLoader(base_dir=store.base_dir))
        card = renderer.render(work, curriculum.get(work.curriculum_id))
    except EmptyCatalogError as e:
        print(f"empty_catalog: {e}")
        return 1
    except IkebanaStudioError as e:
        record_error(paths, stage="share_card", message=str(e), ref=args.work_id)
        print(f"share_card_failed: {e}")
        return 1

    out = ArtifactWriter(paths).write_share_card(card.filename, card.to_png_bytes())
    print(str(out))
    return 0


def cmd_progress(args: argparse.Namespace) -> int:
    cfg, curriculum, store = _context(args)
    summary = summarize(curriculum, store.load(), recent_limit=int(cfg.catalog.get("recent_limit", 5)))

    if args.format == "text":
        print(f"total_works={summary.total_works}")
        print(f"unique_studies={summary.unique_studies}/{summary.total_studies}")
        print(f"completion={summary.completion_percentage:.1f}%")
        for p in summary.by_graduation.values():
            print(f"{p.graduation}: {p.completed}/{p.total}")
        return 0

    if not args.out:
        print("progress_failed: --out is required for json/csv")
        return 2

    if args.format == "csv":
        stats = export_progress_csv(summary, args.out)
    else:
        stats = export_progress_json(summary, args.out)
    print(f"exported={stats.rows_exported}")
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    _, curriculum, store = _context(args)
    try:
        work = new_work(
            curriculum,
            curriculum_id=args.curriculum_id,
            image_ref=args.image,
            author=args.author,
            custom_title=args.title,
            variety=args.variety,
        )
        store.add(work)
    except IkebanaStudioError as e:
        print(f"add_failed: {e}")
        return 1
    print(work.id)
    return 0


def cmd_favorite(args: argparse.Namespace) -> int:
    _, _, store = _context(args)
    try:
        work = store.toggle_favorite(args.work_id)
    except IkebanaStudioError as e:
        print(f"favorite_failed: {e}")
        return 1
    print(f"id={work.id} is_favorite={str(work.is_favorite).lower()}")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    _, _, store = _context(args)
    try:
        store.delete(args.work_id)
    except IkebanaStudioError as e:
        print(f"delete_failed: {e}")
        return 1
    print(f"deleted={args.work_id}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    _, curriculum, store = _context(args)
    works = filter_works(curriculum, store.load(), search=args.search, favorites_only=bool(args.favorites))
    for w in works:
        item = curriculum.get(w.curriculum_id)
        study = item.display_title if item else "unknown study"
        star = "*" if w.is_favorite else " "
        print(f"{star} {w.id}  {w.created_at.date().isoformat()}  {study}  {w.custom_title or '-'}  ({w.author})")
    if not works:
        print("no studies found")
    return 0


COMMANDS = {
    "booklet": cmd_booklet,
    "share-card": cmd_share_card,
    "progress": cmd_progress,
    "add": cmd_add,
    "favorite": cmd_favorite,
    "delete": cmd_delete,
    "list": cmd_list,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)
    try:
        return handler(args)
    except IkebanaStudioError as e:
        # Unreadable catalog, curriculum or config: nothing was produced.
        print(f"{args.command.replace('-', '_')}_failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
