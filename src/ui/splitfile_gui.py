"""
DearPyGui UI for splitfile
Allows user to select an input folder, set chunk size, and split every file in it.
"""
import dearpygui.dearpygui as dpg

from common.errors import BackendError
from ui.workflow_backend import run_batch_workflow


def close_window(sender, app_data, window):
    dpg.delete_item(window)


def run_workflow(input_folder, lines_per_chunk, skip_first, progress_bar, log_window):
    try:
        dpg.set_value(log_window, "Starting split...\n")
        dpg.set_value(progress_bar, 0.0)
        summaries = run_batch_workflow(input_folder, lines_per_chunk, skip_first)
        dpg.set_value(progress_bar, 1.0)
        dpg.set_value(log_window, dpg.get_value(log_window) + "Split complete!\n")
        with dpg.window(label="Summary", modal=True, no_close=False, width=400, height=220) as summary_window:
            dpg.add_text("Processing complete!")
            dpg.add_text(f"Input folder: {input_folder}")
            dpg.add_text(f"Files split: {len(summaries)}")
            for summary in summaries:
                dpg.add_text(f"- {summary.input_path.name}: {summary.chunk_count} chunk(s)")
            dpg.add_button(label="Close", callback=close_window, user_data=summary_window)
    except BackendError as e:
        dpg.set_value(log_window, dpg.get_value(log_window) + f"Error: {e}\n")
        dpg.set_value(progress_bar, 0.0)
        with dpg.window(label="Error", modal=True, no_close=False, width=400, height=120) as error_window:
            dpg.add_text(f"An error occurred:\n{e}")
            dpg.add_button(label="Close", callback=close_window, user_data=error_window)


def main():
    dpg.create_context()
    dpg.create_viewport(title='Splitfile', width=600, height=360)

    TEXT = {
        "input_folder": "Select input folder (CSV/TSV/TXT/LOG files):",
        "lines": "Set lines per output file:",
        "run": "Run split:"
    }

    # file dialogs are root items; input_folder is bound before the dialog can fire
    folder_dialog = dpg.add_file_dialog(
        directory_selector=True,
        show=False,
        width=500,
        height=300,
        callback=lambda sender, app_data: dpg.set_value(input_folder, app_data["file_path_name"]),
    )

    with dpg.window(label="Splitfile", width=580, height=340):
        dpg.add_text(TEXT["input_folder"])
        input_folder = dpg.add_input_text(label="Input Folder", width=400, hint="Folder containing files to split.")
        dpg.add_button(label="Browse Input Folder", callback=lambda: dpg.show_item(folder_dialog))

        dpg.add_text(TEXT["lines"])
        lines_per_chunk = dpg.add_slider_int(label="Lines per file", default_value=1000, min_value=1, max_value=1000000,
                                             width=200)
        skip_first = dpg.add_checkbox(label="Skip first line (header)", default_value=False)

        dpg.add_separator()
        dpg.add_text(TEXT["run"])
        progress_bar = dpg.add_progress_bar(label="Progress", default_value=0.0, width=400)
        log_window = dpg.add_input_text(label="Log", multiline=True, readonly=True, width=400, height=100, default_value="")
        dpg.add_button(label="Run", callback=lambda: run_workflow(
            dpg.get_value(input_folder),
            dpg.get_value(lines_per_chunk),
            dpg.get_value(skip_first),
            progress_bar,
            log_window
        ))

    dpg.setup_dearpygui()
    dpg.show_viewport()
    dpg.start_dearpygui()
    dpg.destroy_context()


if __name__ == "__main__":
    main()
