import json
from pathlib import Path

from recipe_search.indexing.builder import build
from recipe_search.indexing.config import IndexingConfig
from recipe_search.indexing.reindex import main, run_reindex
from recipe_search.indexing.store import IndexStore


def _write_corpus(path: Path, records) -> Path:
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


def test_run_reindex_publishes_store(tmp_path: Path, sample_corpus):
    """
    End-to-end reindex into a temporary directory so real data is untouched.
    """
    cfg = IndexingConfig(
        corpus_path=_write_corpus(tmp_path / "recipes.json", sample_corpus),
        index_path=tmp_path / "processed" / "recipes.db",
    )

    index = run_reindex(config=cfg)

    assert cfg.index_path.is_file(), "Index store should be created"
    assert len(index) == 7
    assert IndexStore(cfg.index_path).load().all_ids() == index.all_ids()


def test_main_reports_success(tmp_path: Path, sample_corpus, capsys):
    corpus = _write_corpus(tmp_path / "recipes.json", sample_corpus + [{"id": 8, "title": ""}])
    db = tmp_path / "recipes.db"

    assert main(["--corpus", str(corpus), "--index", str(db)]) == 0
    out = capsys.readouterr().out
    assert "Reindex complete. 7 recipes (1 skipped)" in out


def test_main_fails_on_missing_corpus(tmp_path: Path):
    db = tmp_path / "recipes.db"
    assert main(["--corpus", str(tmp_path / "absent.json"), "--index", str(db)]) == 1
    assert not db.exists()


def test_failed_reindex_keeps_previous_store(tmp_path: Path, sample_corpus):
    db = tmp_path / "recipes.db"
    IndexStore(db).publish(build(sample_corpus[:3]))

    bad = tmp_path / "broken.json"
    bad.write_text("{not json", encoding="utf-8")
    assert main(["--corpus", str(bad), "--index", str(db)]) == 1

    assert len(IndexStore(db).load()) == 3
