"""Formatting for dataset summaries and PCA results."""

from celldb.core.format import (
    attach_format,
    fmt_number,
    footer,
    key_value,
    render,
    render_table,
    section,
    title_block,
)

from .queries import as_samples, dataset_sparsity
from .results import PCAResult


def format_store_summary(samples, title="Sparse Sample Store"):
    """Render per-sample measurement counts and dataset sparsity.

    Parameters
    ----------
    samples : SampleStore or iterable of SparseSample
        Input collection.
    title : str
        Heading of the summary.

    Returns
    -------
    str
        Multi-line summary.
    """
    samples, dimension = as_samples(samples)
    lines = title_block(title)
    lines.append(key_value("Samples", len(samples)))
    lines.append(key_value("Features", "NA" if dimension is None else dimension))

    if samples:
        lines.append(key_value("Sparsity", fmt_number(dataset_sparsity(samples))))
        rows = [[s.id, s.num_active(), s.true_zeros(), s.dimension - s.num_active()] for s in samples]
        lines.append("")
        lines.extend(render_table(["Sample", "Measured", "True zeros", "Missing"], rows, left=("Sample",)))

    lines.extend(footer("Missing = features without a measurement (not zeros)."))
    return render(lines)


def _format_pca_result(result):
    lines = title_block("Principal Component Analysis", f"{result.n_samples} samples")

    k = result.components.shape[1]
    labels = [f"PC{j + 1}" for j in range(k)]
    cumulative = result.explained_variance_ratio.cumsum()
    rows = [
        [
            labels[j],
            fmt_number(result.explained_variance[j]),
            fmt_number(result.explained_variance_ratio[j]),
            fmt_number(cumulative[j]),
        ]
        for j in range(k)
    ]
    lines.append("")
    lines.extend(render_table(["Component", "Variance", "Ratio", "Cumulative"], rows))

    lines.extend(section("Loadings"))
    loadings = [[str(i), *[fmt_number(v) for v in row]] for i, row in enumerate(result.components)]
    lines.append("")
    lines.extend(render_table(["Feature", *labels], loadings))
    lines.extend(footer())
    return render(lines)


attach_format(PCAResult, _format_pca_result)
