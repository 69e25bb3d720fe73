#!/usr/bin/env python3
"""
Load the ingredient catalog (categories, ingredients, recipes) from JSON
into the DynamoDB table.

Usage:
    python scripts/seed_catalog.py --input data/sample_catalog.json --table mealprep-dev
"""
import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import boto3

from mealprep.models.ingredient import Ingredient, IngredientCategory
from mealprep.models.recipe import Recipe
from mealprep.utils.dynamo import (
    CATEGORY_PK,
    INGREDIENT_PK,
    RECIPE_PK,
    create_category_sk,
    create_ingredient_sk,
    create_recipe_sk,
    to_dynamo,
)
from mealprep.utils.logging import logger

# catalog section -> (model, partition key, sort key builder)
SECTIONS = {
    "categories": (IngredientCategory, CATEGORY_PK, create_category_sk),
    "ingredients": (Ingredient, INGREDIENT_PK, create_ingredient_sk),
    "recipes": (Recipe, RECIPE_PK, create_recipe_sk),
}


def build_catalog_items(catalog: Dict[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Validate catalog entries and turn them into table items.

    Entries may use camelCase or snake_case keys. Items are stored with
    snake_case attribute names and floats converted to Decimal.

    Raises:
        pydantic.ValidationError: If an entry does not match its model
    """
    items = []
    for section, (model, pk, sk_builder) in SECTIONS.items():
        for entry in catalog.get(section, []):
            record = model.model_validate(entry)
            item = record.model_dump(mode="json")
            item.update({"PK": pk, "SK": sk_builder(record.id)})
            items.append(to_dynamo(item))
    return items


def seed_catalog(input_file: Path, table_name: str) -> int:
    """
    Write every catalog item to the table, overwriting existing entries.

    Returns:
        Number of items written
    """
    with input_file.open(encoding="utf-8") as f:
        catalog = json.load(f)

    items = build_catalog_items(catalog)
    table = boto3.resource("dynamodb").Table(table_name)
    with table.batch_writer(overwrite_by_pkeys=["PK", "SK"]) as batch:
        for item in items:
            batch.put_item(Item=item)

    logger.info("Seeded catalog", extra={"table": table_name, "items": len(items)})
    return len(items)


def main():
    parser = argparse.ArgumentParser(description="Seed the meal-prep catalog into DynamoDB")
    parser.add_argument("--input", type=Path, required=True, help="Catalog JSON file")
    parser.add_argument(
        "--table",
        default=os.environ.get("MEALPREP_TABLE_NAME"),
        help="Table name (default: $MEALPREP_TABLE_NAME)"
    )
    args = parser.parse_args()

    if not args.table:
        parser.error("--table is required when MEALPREP_TABLE_NAME is not set")
    if not args.input.exists():
        logger.error("Catalog file not found", extra={"input": str(args.input)})
        sys.exit(1)

    count = seed_catalog(args.input, args.table)
    print(f"Wrote {count} catalog items to {args.table}")


if __name__ == "__main__":
    main()
