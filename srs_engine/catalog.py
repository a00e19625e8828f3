import pandas as pd
from pathlib import Path
from typing import Any, Dict, Iterable, List

from srs_engine.schemas import CatalogConcept

READY_STATUS = "ready"


def concept_id_for(document_id: Any, index: int) -> str:
    """Stable concept id for the index-th study prompt of a document"""
    return f"{document_id}:{index}"


def catalog_from_documents(documents: Iterable[Dict[str, Any]]) -> List[CatalogConcept]:
    """
    Derive catalog concepts from processed documents.

    Each document is a mapping with ``id``, ``status`` and ``study_prompts``
    (a list of ``{"topic": ..., "prompt": ...}``). Only ready documents with
    prompts contribute; a prompt without a topic is labelled by position.
    """
    concepts = []
    for doc in documents:
        if doc.get("status", READY_STATUS) != READY_STATUS:
            continue
        prompts = doc.get("study_prompts")
        if not prompts or not isinstance(prompts, list):
            continue

        for index, prompt in enumerate(prompts):
            topic = prompt.get("topic") if isinstance(prompt, dict) else None
            label = str(topic).strip() if topic else ""
            concepts.append(CatalogConcept(
                concept_id=concept_id_for(doc["id"], index),
                concept_label=label or f"Concept {index + 1}"
            ))
    return concepts


class CatalogParser:
    """
    Load a catalog snapshot from a tabular file.
    Expected columns: concept_id, concept_label (or title)
    """

    @staticmethod
    def parse_frame(df: pd.DataFrame) -> List[CatalogConcept]:
        # Normalize column names
        df.columns = df.columns.str.strip().str.lower()

        concepts = []
        for _, row in df.iterrows():
            concept_id = CatalogParser._clean(row.get("concept_id"))
            label = CatalogParser._clean(row.get("concept_label", row.get("title")))

            # Skip rows with missing ids
            if not concept_id:
                continue
            concepts.append(CatalogConcept(concept_id=concept_id, concept_label=label or concept_id))

        return concepts

    @staticmethod
    def parse_csv_table(file_path: str) -> List[CatalogConcept]:
        return CatalogParser.parse_frame(pd.read_csv(file_path, dtype=str))

    @staticmethod
    def parse_excel_table(file_path: str) -> List[CatalogConcept]:
        return CatalogParser.parse_frame(pd.read_excel(file_path, dtype=str))

    @staticmethod
    def auto_parse(file_path: str) -> List[CatalogConcept]:
        """
        Automatically detect file type and parse accordingly.
        Supports: CSV, Excel (xlsx, xls)
        """
        file_ext = Path(file_path).suffix.lower()

        if file_ext == ".csv":
            return CatalogParser.parse_csv_table(file_path)
        elif file_ext in [".xlsx", ".xls"]:
            return CatalogParser.parse_excel_table(file_path)
        else:
            raise ValueError(f"Unsupported file format: {file_ext}. Use .csv or .xlsx")

    @staticmethod
    def _clean(value: Any) -> str:
        if value is None or pd.isna(value):
            return ""
        value = str(value).strip()
        return "" if value.lower() == "nan" else value
