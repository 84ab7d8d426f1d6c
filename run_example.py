#!/usr/bin/env python3
"""Example script to run the hospitality model on the sample inputs."""

import logging

from hospitality_model.analysis import (
    SensitivityConfig,
    SensitivityRange,
    SensitivityVariable,
    build_scenario_summary,
    run_scenario_triad,
    run_sensitivity,
)
from hospitality_model.export import sensitivity_table
from hospitality_model.pipeline import run_full_model
from hospitality_model.sample import sample_model_input, sample_resort_input


def _pct(value):
    return "n/a" if value is None else f"{value:.2%}"


def _money(value):
    return "n/a" if value is None else f"${value:,.0f}"


def run_single(resort: bool = False):
    """Run the full model once and print the headline KPIs."""
    model_input = sample_resort_input() if resort else sample_model_input()

    print("\n" + "=" * 60)
    print("HOSPITALITY FINANCIAL MODEL")
    print(model_input.scenario.name)
    print("=" * 60 + "\n")

    output = run_full_model(model_input)
    kpis = output.kpis()
    summary = build_scenario_summary(output)

    print(f"{'Metric':<25} {'Value':>20}")
    print("-" * 46)
    print(f"{'NPV':<25} {_money(kpis['npv']):>20}")
    print(f"{'Enterprise Value':<25} {_money(kpis['enterprise_value']):>20}")
    print(f"{'Unlevered IRR':<25} {_pct(kpis['unlevered_irr']):>20}")
    print(f"{'Equity Multiple':<25} {kpis['equity_multiple']:>19.2f}x")
    payback = kpis["payback_period"]
    print(f"{'Payback (years)':<25} {'n/a' if payback is None else f'{payback:.2f}':>20}")
    print(f"{'WACC':<25} {_pct(kpis['wacc']):>20}")
    avg_dscr = summary.capital_kpis.avg_dscr
    print(f"{'Average DSCR':<25} {'n/a' if avg_dscr is None else f'{avg_dscr:.2f}x':>20}")
    print(f"{'Breakeven Occupancy':<25} {_pct(output.breakeven.breakeven_occupancy):>20}")

    print(f"\n{'Partner':<25} {'IRR':>10} {'MOIC':>10}")
    print("-" * 46)
    for partner in summary.waterfall_kpis:
        moic = "n/a" if partner.moic is None else f"{partner.moic:.2f}x"
        print(f"{partner.partner_name:<25} {_pct(partner.irr):>10} {moic:>10}")

    for breach in output.capital.covenant_breaches:
        print(f"Covenant {breach.covenant_id} breached in month {breach.month_number} ({breach.severity})")

    triad = run_scenario_triad(model_input, 0.10)
    print(f"\n{'Case':<25} {'NPV':>20}")
    print("-" * 46)
    for label, case in (("Stress (-10%)", triad.stress), ("Base", triad.base), ("Upside (+10%)", triad.upside)):
        print(f"{label:<25} {_money(case.npv):>20}")


def run_grid():
    """Occupancy x discount-rate NPV grid."""
    print("\n" + "=" * 60)
    print("SENSITIVITY: OCCUPANCY x DISCOUNT RATE (NPV)")
    print("=" * 60 + "\n")

    config = SensitivityConfig(
        x=SensitivityRange(SensitivityVariable.OCCUPANCY, 0.8, 1.2, steps=5),
        y=SensitivityRange(SensitivityVariable.DISCOUNT_RATE, 0.08, 0.12, steps=3),
    )
    result = run_sensitivity(sample_model_input(), config)
    print(sensitivity_table(result, "npv").round(0).to_string())


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Hospitality financial model")
    parser.add_argument("--resort", action="store_true", help="Use the hotel + villas + restaurant sample")
    parser.add_argument("--sensitivity", action="store_true", help="Also run a 5x3 sensitivity grid")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline stages")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    run_single(resort=args.resort)

    if args.sensitivity:
        run_grid()

    print("\nDone.")


if __name__ == "__main__":
    main()
