"""
Demo script for modeltidy.

This script fits a few models to simulated data and shows:
- Component tables (tidy) with confidence intervals
- Model summaries (glance)
- Observation tables (augment) on training and held-out data
- Contract validation of a hand-built table
"""

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from sklearn.linear_model import Ridge

from modeltidy import TidyContractValidator, augment, glance, tidy


def create_sample_data(n=200, seed=0):
    """Simulated minutes/usage/points data."""
    rng = np.random.default_rng(seed)
    minutes = rng.uniform(10, 40, n)
    usage = rng.normal(0.22, 0.04, n)
    points = 2.0 + 0.55 * minutes + 30.0 * usage + rng.normal(0, 3.0, n)
    data = pd.DataFrame({'minutes': minutes, 'usage': usage, 'points': points})
    data.loc[5, 'usage'] = np.nan
    return data


def main():
    data = create_sample_data()
    train, holdout = data.iloc[:150], data.iloc[150:].drop(columns=['points'])

    print("=" * 60)
    print("OLS: points ~ minutes + usage")
    print("=" * 60)
    ols = smf.ols("points ~ minutes + usage", data=train).fit()
    print(tidy(ols, conf_int=True))
    print(glance(ols).T)

    augmented = augment(ols)
    print(f"\nTraining rows: {len(train)}, augmented rows: {len(augmented)}")
    print(augmented.head(8))

    print("\nHeld-out predictions with prediction intervals:")
    print(augment(ols, newdata=holdout, interval="prediction").head())

    print("\n" + "=" * 60)
    print("Poisson GLM on rounded points")
    print("=" * 60)
    counts = train.dropna().assign(points=lambda d: d['points'].clip(lower=0).round())
    poisson = smf.glm("points ~ minutes", data=counts, family=sm.families.Poisson()).fit()
    print(tidy(poisson, conf_int=True, exponentiate=True))
    print(glance(poisson).T)

    print("\n" + "=" * 60)
    print("Ridge (scikit-learn)")
    print("=" * 60)
    complete = train.dropna()
    ridge = Ridge(alpha=1.0).fit(complete[['minutes', 'usage']], complete['points'])
    print(tidy(ridge))
    print(augment(ridge, data=complete, response='points').head())

    print("\n" + "=" * 60)
    print("Validating a hand-built table")
    print("=" * 60)
    bad = pd.DataFrame({
        'term': ['minutes', 'minutes', None],
        'estimate': [0.5, 'n/a', 1.0],
        'conf.low': [0.6, 0.1, 0.2],
        'conf.high': [0.4, 0.9, 1.8],
    })
    report = TidyContractValidator().validate_component_table(bad, {'conf_int': True})
    for violation in report.violations:
        print(f"  - {violation}")


if __name__ == "__main__":
    main()
