"""
Minesweeper Position Analyzer - Interactive Viewer

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import AbstractSet, Dict, Tuple

from minesweeper_analyzer import (
    FLAGGED,
    REVEALED,
    SAFE,
    AnalysisResult,
    Board,
    BoardDecodeError,
    analyze,
    best_guesses,
    decode_board,
    encode_board,
    generate_position,
    recommend_move,
    summarize_analysis,
)

NUMBER_COLORS: Dict[int, str] = {
    1: "#2222ff",
    2: "#008000",
    3: "#ff0000",
    4: "#000080",
    5: "#800000",
    6: "#008080",
    7: "#000000",
    8: "#808080",
}

PRESETS: Dict[str, Tuple[int, int, int]] = {
    "Beginner (9x9, 10)": (9, 9, 10),
    "Intermediate (16x16, 40)": (16, 16, 40),
    "Expert (16x30, 99)": (16, 30, 99),
}


def probability_color(p: float) -> str:
    """Green for safe through red for likely mines."""
    p = min(1.0, max(0.0, p))
    return f"rgb({round(255 * p)},{round(255 * (1 - p))},80)"


def render_board_html(
    board: Board,
    result: AnalysisResult,
    show_mines: bool = False,
    show_probabilities: bool = True,
    highlight_cells: AbstractSet[Tuple[int, int]] = frozenset(),
) -> str:
    """Render the position as an HTML table colored by deductions and probabilities."""
    # Scale cell size based on board width
    if board.cols >= 30:
        cell_size = 18
        font_size = "11px"
    elif board.cols >= 16:
        cell_size = 22
        font_size = "13px"
    else:
        cell_size = 26
        font_size = "15px"

    deductions = {(d.r, d.c): d for d in result.deductions}

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for r in range(board.rows):
        html += "<tr>"
        for c in range(board.cols):
            cell = board.grid[r][c]
            d = deductions.get((r, c))
            p = result.probability_map.get((r, c))
            text_color = "#000000"
            display = ""

            if cell.kind == REVEALED:
                bg = "#d4d4d4"
                display = str(cell.value) if cell.value > 0 else ""
                text_color = NUMBER_COLORS.get(cell.value, "#000000")
            elif cell.kind == FLAGGED:
                bg = "#d4d4d4"
                display = "F"
                text_color = "#ff0000"
            elif d is not None:
                bg = "#00dd00" if d.action == SAFE else "#ff3333"
                display = "S" if d.action == SAFE else "X"
            elif show_mines and cell.is_mine:
                bg = "#ff9999"
                display = "*"
            elif show_mines:
                bg = "#d4d4d4"
            elif show_probabilities and p is not None:
                bg = probability_color(p)
            else:
                bg = "#999999"

            title = f"R{r} C{c}"
            if p is not None:
                title += f": {p * 100:.1f}%"
            if d is not None:
                title += f" - {d.action.upper()} ({'; '.join(d.reasons)})"

            border = "2px solid #ffffff" if (r, c) in highlight_cells else "1px solid #777"

            html += f'''<td title="{title}" style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def main():
    st.set_page_config(
        page_title="Minesweeper Position Analyzer",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minesweeper Position Analyzer")
    st.markdown("""
    Certain deductions and estimated mine probabilities for a partially revealed board.
    """)

    # Initialize session state
    if "export" not in st.session_state:
        st.session_state.export = None
        st.session_state.import_error = None

    # Sidebar configuration
    st.sidebar.header("Position")

    preset = st.sidebar.selectbox("Difficulty Preset", list(PRESETS.keys()), index=2)
    rows, cols, mines = PRESETS[preset]

    algorithm = st.sidebar.selectbox(
        "Mine Generation",
        ["safe_neighborhood_rule", "safe_first_action_rule"],
        help="safe_neighborhood_rule: First click + neighbors are safe. "
             "safe_first_action_rule: Only first click is safe.",
    )
    max_rounds = st.sidebar.slider(
        "Deduction rounds before stopping",
        0,
        100,
        50,
        help="Generated positions apply this many rounds of certain moves after the first click.",
    )

    if st.sidebar.button("Generate Random Position", type="primary") or st.session_state.export is None:
        _, board = generate_position(rows, cols, mines, algorithm, max_rounds=max_rounds)
        st.session_state.export = encode_board(board)
        st.session_state.import_error = None

    with st.sidebar.expander("Import board export"):
        text = st.text_area("Paste export string", value="", height=120)
        if st.button("Import"):
            try:
                decode_board(text)
            except BoardDecodeError as exc:
                st.session_state.import_error = str(exc)
            else:
                st.session_state.export = text.strip()
                st.session_state.import_error = None

    if st.session_state.import_error:
        st.sidebar.error(f"Import failed: {st.session_state.import_error}")

    show_probabilities = st.sidebar.checkbox("Show probabilities", value=True)
    show_mines = st.sidebar.checkbox("Show mines (ground truth)", value=False)

    board = decode_board(st.session_state.export)
    result = analyze(board)
    stats = summarize_analysis(board, result)
    guesses = best_guesses(result, 8)
    move = recommend_move(result)

    st.markdown(
        f"Mines remaining: **{stats['mines_left']}** | "
        f"Hidden cells: **{stats['hidden_count']}** | "
        f"Frontier: **{stats['frontier_count']}** | "
        f"Deductions: **{stats['deductions_count']}**"
    )

    html = render_board_html(
        board,
        result,
        show_mines=show_mines,
        show_probabilities=show_probabilities,
        highlight_cells={(h.r, h.c) for h in guesses},
    )
    st.markdown(html, unsafe_allow_html=True)

    # Board legend
    st.markdown("""
    <div style="font-size: 12px; margin-top: 10px;">
    <b>Legend:</b>
    <span style="background: #00dd00; padding: 2px 6px; margin: 0 4px; font-weight: bold;">S</span> Certainly safe
    <span style="background: #ff3333; padding: 2px 6px; margin: 0 4px; font-weight: bold;">X</span> Certainly a mine
    <span style="background: rgb(0,255,80); padding: 2px 6px; margin: 0 4px;">&nbsp;</span> Low risk
    <span style="background: rgb(255,0,80); padding: 2px 6px; margin: 0 4px;">&nbsp;</span> High risk
    <span style="border: 2px solid #ffffff; padding: 2px 6px; margin: 0 4px;">&nbsp;</span> Best guesses
    </div>
    """, unsafe_allow_html=True)

    guesses_tab, deductions_tab, stats_tab = st.tabs(["Best Guesses", "Deductions", "Stats"])

    with guesses_tab:
        if move is None:
            st.info("No hidden cells without a certain deduction.")
        else:
            pick = move.pick
            where = "frontier" if pick.is_frontier else "interior"
            st.subheader(
                f"Recommended move: R{pick.r} C{pick.c} "
                f"({pick.probability * 100:.1f}% mine chance)"
            )
            if show_mines:
                if board.grid[pick.r][pick.c].is_mine:
                    st.error("Would have died: this cell is a mine.")
                else:
                    st.success("Would have survived: this cell is safe.")
            st.markdown(
                f"This is the {where} cell with the lowest estimated mine "
                "probability on the board."
            )
            with st.expander("How to think through this", expanded=True):
                for step in move.steps:
                    st.text(step)
            st.caption(
                "Shortcut: if remaining mines / hidden cells is under 25%, click "
                "the interior. If a frontier cell is held under 20% by its numbers, "
                "prefer it instead since it reveals more."
            )
            st.markdown("**All best guesses**")

        for h in guesses:
            where = "frontier" if h.is_frontier else "interior"
            st.text(f"R{h.r} C{h.c}: {h.probability * 100:.1f}% ({where})")

    with deductions_tab:
        safe_count = int(stats["safe_deductions"])
        mine_count = int(stats["mine_deductions"])
        st.subheader(f"Deductions: {safe_count} safe + {mine_count} mines")
        if not result.deductions:
            st.info("No logical deductions available, must guess.")
        for d in result.deductions:
            line = f"R{d.r} C{d.c} -> {d.action.upper()}: {'; '.join(d.reasons)}"
            if d.conflicting:
                st.warning(line + " (conflicting evidence, check the flags)")
            elif d.action == SAFE:
                st.success(line)
            else:
                st.error(line)

    with stats_tab:
        st.text(
            f"Total mines: {stats['total_mines']} | Flagged: {stats['flagged']} | "
            f"Remaining: {stats['mines_left']}"
        )
        st.text(
            f"Hidden cells: {stats['hidden_count']} "
            f"({stats['frontier_count']} frontier + {stats['interior_count']} interior)"
        )
        st.text(f"Global mine density in hidden: {stats['global_density'] * 100:.1f}%")
        st.text(f"Interior mine density (estimated): {stats['interior_density'] * 100:.1f}%")

    st.markdown("---")
    st.markdown("**Export**")
    st.code(st.session_state.export, language=None)


if __name__ == "__main__":
    main()
