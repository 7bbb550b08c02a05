"""Framework-aware optimization tips."""

from __future__ import annotations

from renderlint.kernel.framework.models import FrameworkInfo, FrameworkName

# (framework, feature) -> tips; feature None rows apply to every project of
# that framework. Row order is emission order.
TIP_TABLE: tuple[tuple[FrameworkName, str | None, tuple[str, ...]], ...] = (
    (
        FrameworkName.NEXT,
        None,
        (
            "Use next/dynamic for code splitting heavy components",
            "Avoid passing serializable props through server/client boundary",
        ),
    ),
    (
        FrameworkName.NEXT,
        "app-router",
        (
            "Keep server components as the default for better performance",
            'Use "use client" directive only for interactive components',
            "Consider using Server Actions for mutations",
            "Consider using server components to avoid client-side context re-renders",
            "Move expensive computations to server components",
        ),
    ),
    (
        FrameworkName.NEXT,
        "pages-router",
        ("Fetch data in getStaticProps or getServerSideProps instead of client effects",),
    ),
    (
        FrameworkName.NEXT,
        "middleware",
        ("Keep middleware lean; it runs before every matched request",),
    ),
    (
        FrameworkName.REMIX,
        None,
        (
            "Use loader data efficiently to minimize client state",
            "Prefer fetcher over useNavigate for non-navigation mutations",
            "Avoid useEffect for data fetching, use loaders instead",
            "Use loader data instead of context for server data",
        ),
    ),
    (
        FrameworkName.REMIX,
        "v2-routes",
        (
            "Use defer for streaming slow data",
            "Consider using useFetcher.load for background data fetching",
        ),
    ),
    (
        FrameworkName.VITE,
        None,
        (
            "Use React.lazy with Suspense for code splitting",
            "Configure build.rollupOptions.output.manualChunks for optimal chunking",
            "Enable build.sourcemap only in development",
        ),
    ),
    (
        FrameworkName.VITE,
        "react-plugin",
        ("Use @vitejs/plugin-react-swc for faster builds",),
    ),
    (
        FrameworkName.VITE,
        "ssr",
        ("Avoid reading browser-only globals during server rendering",),
    ),
    (
        FrameworkName.CRA,
        None,
        (
            "Consider migrating to Vite for faster development builds",
            "Use React.lazy for code splitting",
            'Run "npm run build -- --stats" to analyze bundle size',
        ),
    ),
    (
        FrameworkName.CRA,
        "testing-library",
        ("Assert render counts in tests for components that must stay memoized",),
    ),
    (
        FrameworkName.GATSBY,
        None,
        (
            "Prefer StaticQuery over page queries for reusable components",
            "Use incremental builds for faster development",
            "Use GraphQL for data transformation at build time",
        ),
    ),
    (
        FrameworkName.GATSBY,
        "v5",
        ("Consider using DSG (Deferred Static Generation) for large sites",),
    ),
    (
        FrameworkName.GATSBY,
        "image",
        ("Use gatsby-plugin-image for optimized images",),
    ),
)


def tips_for(framework: FrameworkInfo | None) -> list[str]:
    """Return ordered, de-duplicated tips for a detected framework.

    Parameters
    ----------
    framework : FrameworkInfo | None
        Detection result; None and ``unknown`` yield no tips

    Returns
    -------
    list[str]
        General tips for the framework followed by feature tips, in table order
    """
    if framework is None or framework.name == FrameworkName.UNKNOWN:
        return []

    tips: list[str] = []
    seen: set[str] = set()
    for name, feature, rows in TIP_TABLE:
        if name != framework.name:
            continue
        if feature is not None and feature not in framework.features:
            continue
        for tip in rows:
            if tip not in seen:
                seen.add(tip)
                tips.append(tip)
    return tips
