"""Tests for the deployment image tag."""
from infrastructure.get_image_tag import IMAGE_PACKAGES, get_content_hash


def make_tree(root):
    (root / "Dockerfile").write_text("FROM public.ecr.aws/lambda/python:3.12\n")
    (root / "main.py").write_text("def healthz(event, context): ...\n")
    for package in IMAGE_PACKAGES:
        (root / package).mkdir()
        (root / package / "__init__.py").write_text("")


def test_unchanged_tree_keeps_its_tag(tmp_path):
    make_tree(tmp_path)
    assert get_content_hash(tmp_path) == get_content_hash(tmp_path)


def test_source_change_moves_the_tag(tmp_path):
    make_tree(tmp_path)
    before = get_content_hash(tmp_path)

    (tmp_path / "handlers" / "budgets.py").write_text("def list_budgets(event, context): ...\n")
    assert get_content_hash(tmp_path) != before


def test_files_outside_the_image_do_not_move_the_tag(tmp_path):
    make_tree(tmp_path)
    before = get_content_hash(tmp_path)

    (tmp_path / "README.md").write_text("notes\n")
    (tmp_path / "handlers" / "notes.txt").write_text("not python\n")
    assert get_content_hash(tmp_path) == before
