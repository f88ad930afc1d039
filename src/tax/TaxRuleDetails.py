import json
import os
from typing import Dict, List, Optional

from model.TaxRules import TaxRuleTable
from model.errors import InvalidInputError

DEFAULT_REFERENCE_PATH = os.path.normpath(
    os.path.join(os.path.dirname(__file__), '../../reference/tax-rules.json')
)


class TaxRuleDetails:
	"""Loads the versioned tax rule tables from `reference/tax-rules.json`.

	This is the only place that reads rule files. The calculators receive a
	`TaxRuleTable` instance and never look anything up themselves, so a
	historical calculation can be reproduced by selecting an older table.
	"""

	def __init__(self, ref_path: Optional[str] = None):
		"""
		ref_path: path to the reference JSON (defaults to reference/tax-rules.json)
		"""
		self.ref_path = ref_path or DEFAULT_REFERENCE_PATH
		self.tables_by_year: Dict[str, TaxRuleTable] = {}
		self._load_tables()

	def _load_tables(self):
		with open(self.ref_path, 'r') as f:
			data = json.load(f)

		tax_years = data.get("taxYears", [])
		if not tax_years:
			raise InvalidInputError("taxYears", "must contain at least one entry")

		# Sort by effective date so latest() is the most recent table
		tax_years = sorted(tax_years, key=lambda x: x.get("effectiveDate", ""))

		for year_data in tax_years:
			table = TaxRuleTable.from_dict(year_data)
			if table.tax_year in self.tables_by_year:
				raise InvalidInputError("taxYears", f"contains duplicate tax year {table.tax_year}")
			self.tables_by_year[table.tax_year] = table

	def tax_years(self) -> List[str]:
		"""Tax years available, oldest first."""
		return list(self.tables_by_year.keys())

	def rules_for(self, tax_year: Optional[str] = None) -> TaxRuleTable:
		"""
		Returns the rule table for the given tax year, or the latest one when
		tax_year is None.
		"""
		if tax_year is None:
			return self.latest()
		if tax_year not in self.tables_by_year:
			raise InvalidInputError("tax_year", f"has no rule table (available: {self.tax_years()})")
		return self.tables_by_year[tax_year]

	def latest(self) -> TaxRuleTable:
		return self.tables_by_year[self.tax_years()[-1]]
