"""
PrintCost Studio - 3D print cost estimation from G-code files

Tabs: G-code Loader -> Pricing Calculator -> History
"""

import logging
import os
import sys
from dataclasses import replace
from datetime import date

from PyQt5.QtCore import Qt, QThread, pyqtSignal
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QApplication, QCheckBox, QComboBox, QFileDialog, QGroupBox, QHBoxLayout,
    QLabel, QLineEdit, QListWidget, QListWidgetItem, QMessageBox, QPushButton,
    QSizePolicy, QSplitter, QStatusBar, QTabWidget, QTextEdit, QVBoxLayout, QWidget
)

from printcost.analyzer import AnalysisMethod, AnalysisState, GcodeAnalyzer, is_gcode_file
from printcost.deep_scan import DeepScanner
from printcost.errors import InputRejected
from printcost.history import HistoryEntry, HistoryStore, QSettingsBackend
from printcost.invoice import build_receipt, receipt_filename
from printcost.material import split_duration
from printcost.pricing import (
    CURRENCIES, CostInput, calculate_costs, convert_currency, format_breakdown, parse_field
)
from printcost.settings import configure_logging, load_settings

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    AnalysisState.IDLE: "Ready",
    AnalysisState.PARSING: "Parsing G-code comments...",
    AnalysisState.DEEP_SCANNING: "Running AI deep scan...",
    AnalysisState.FAILED: "G-code analysis failed",
    AnalysisState.SUCCEEDED: "G-code analysis complete",
}


class AnalysisWorker(QThread):
    status_changed = pyqtSignal(object)
    analysis_finished = pyqtSignal(object)

    def __init__(self, cost_input, deep_scanner, path):
        super().__init__()
        self.path = path
        self.analyzer = GcodeAnalyzer(cost_input, deep_scanner, on_status=self.status_changed.emit)

    def run(self):
        outcome = self.analyzer.analyze(self.path)
        self.analysis_finished.emit(outcome)


class GCodeLoaderTab(QWidget):
    pricing_requested = pyqtSignal()

    def __init__(self, cost_input, deep_scanner):
        super().__init__()
        self.cost_input = cost_input
        self.deep_scanner = deep_scanner
        self.file_path = None
        self.worker = None
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout()

        # File selection group
        file_group = QGroupBox("G-code File")
        file_layout = QVBoxLayout()

        self.file_label = QLabel("No file selected")
        self.file_label.setStyleSheet("font-weight: bold; color: #555;")

        self.browse_button = QPushButton("Browse G-code")
        self.browse_button.clicked.connect(self.browse_gcode)
        self.browse_button.setStyleSheet("padding: 8px; font-weight: bold;")
        self.browse_button.setFixedWidth(250)

        file_layout.addWidget(self.file_label)
        file_layout.addWidget(self.browse_button)
        file_group.setLayout(file_layout)
        layout.addWidget(file_group)

        self.analyze_button = QPushButton("Analyze")
        self.analyze_button.setEnabled(False)
        self.analyze_button.clicked.connect(self.analyze_gcode)
        self.analyze_button.setStyleSheet(
            "background-color: #4CAF50; color: white; padding: 5px; font-size: 14pt; font-weight: bold;"
        )
        self.analyze_button.setFixedWidth(265)
        layout.addWidget(self.analyze_button)

        self.state_label = QLabel(STATUS_TEXT[AnalysisState.IDLE])
        self.state_label.setStyleSheet("color: #555;")
        layout.addWidget(self.state_label)

        # Results display
        results_group = QGroupBox("G-code Analysis")
        results_layout = QVBoxLayout()

        self.results_text = QTextEdit()
        self.results_text.setReadOnly(True)
        self.results_text.setFont(QFont("Courier", 10))
        self.results_text.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.results_text.setPlaceholderText("G-code analysis results will appear here...")
        results_layout.addWidget(self.results_text)

        results_group.setLayout(results_layout)
        layout.addWidget(results_group)

        self.pricing_button = QPushButton("Pricing →")
        self.pricing_button.setEnabled(False)
        self.pricing_button.clicked.connect(self.pricing_requested.emit)
        self.pricing_button.setStyleSheet("""
            background-color: #2196F3;
            color: white;
            padding: 10px;
            font-size: 14pt;
            font-weight: bold;
            border-radius: 5px;
            """)
        self.pricing_button.setFixedWidth(250)
        layout.addWidget(self.pricing_button, 0, Qt.AlignRight)

        layout.addStretch(1)
        self.setLayout(layout)

    def browse_gcode(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open G-code File", "", "G-code Files (*.gcode)"
        )
        if file_path:
            self.file_path = file_path
            self.file_label.setText(f"Selected: {os.path.basename(file_path)}")
            self.analyze_button.setEnabled(True)

    def analyze_gcode(self):
        if not self.file_path:
            QMessageBox.warning(self, "Error", "Please select a G-code file first.")
            return
        if not is_gcode_file(self.file_path):
            QMessageBox.warning(self, "Invalid File", InputRejected.user_message)
            return

        self.analyze_button.setEnabled(False)
        self.browse_button.setEnabled(False)
        self.pricing_button.setEnabled(False)
        self.results_text.clear()

        self.worker = AnalysisWorker(self.cost_input, self.deep_scanner, self.file_path)
        self.worker.status_changed.connect(self.show_state)
        self.worker.analysis_finished.connect(self.on_analysis_finished)
        self.worker.start()

    def show_state(self, state):
        self.state_label.setText(STATUS_TEXT[state])
        self.window().status_message.setText(STATUS_TEXT[state])

    def on_analysis_finished(self, outcome):
        self.analyze_button.setEnabled(True)
        self.browse_button.setEnabled(True)

        if outcome.state is AnalysisState.FAILED:
            QMessageBox.critical(self, "Analysis Error", outcome.error.user_message)
            self.window().status_message.setStyleSheet("color: red; font-weight: bold;")
            return

        self.display_results(outcome)
        self.window().status_message.setStyleSheet("color: green; font-weight: bold;")
        self.pricing_button.setEnabled(True)
        self.pricing_requested.emit()

    def display_results(self, outcome):
        extraction, result = outcome.extraction, outcome.result
        hours, minutes, seconds = split_duration(extraction.print_time_seconds)

        def show(value, unit):
            return "Not found" if value is None else f"{value:.2f} {unit}"

        result_text = (
            f"G-code Metadata:\n"
            f"-----------------\n"
            f"Method:         {'AI deep scan' if outcome.method is AnalysisMethod.AI else 'Local parser'}\n"
            f"Print Time:     {hours}h {minutes}m {seconds}s\n"
            f"Filament Used:  {show(extraction.filament_length_mm, 'mm')}\n"
            f"Weight (found): {show(extraction.filament_weight_g, 'g')}\n"
            f"Weight (used):  {result.weight_g:.2f} g"
        )
        self.results_text.setText(result_text)


class PricingTab(QWidget):
    history_saved = pyqtSignal()

    # (label, attribute, type)
    DETAIL_FIELDS = [
        ("Print Name", "print_name", str),
        ("Customer Name", "customer_name", str),
        ("Date", "purchase_date", str),
    ]
    MATERIAL_FIELDS = [
        ("Filament Diameter (mm)", "filament_diameter", float),
        ("Filament Weight (g)", "filament_weight", float),
        ("Filament Price (per kg)", "filament_price", float),
    ]
    OPTIONAL_SECTIONS = [
        ("Electricity", "include_electricity", [
            ("Print Time (hours)", "print_time_hours", int),
            ("Print Time (minutes)", "print_time_minutes", int),
            ("Print Time (seconds)", "print_time_seconds", int),
            ("Electricity Rate (per kWh)", "electricity_rate", float),
            ("Printer Power (kW)", "printer_power_kw", float),
        ]),
        ("Labor", "include_labor", [
            ("Labor Time (hours)", "labor_time_hours", int),
            ("Labor Time (minutes)", "labor_time_minutes", int),
            ("Labor Rate (per hour)", "labor_rate", float),
        ]),
        ("Post-Processing", "include_post_processing", [
            ("Post-Processing (hours)", "post_processing_hours", int),
            ("Post-Processing (minutes)", "post_processing_minutes", int),
            ("Post-Processing Rate (per hour)", "post_processing_rate", float),
        ]),
    ]

    def __init__(self, cost_input, store):
        super().__init__()
        self.cost_input = cost_input
        self.store = store
        self.inputs = {}
        self.field_types = {}
        self.checkboxes = {}
        self.init_ui()
        self.load_from_input()

    def _add_field(self, layout, label_text, key, kind):
        hbox = QHBoxLayout()
        label = QLabel(label_text)
        label.setMinimumWidth(200)
        input_field = QLineEdit()
        input_field.textEdited.connect(self.on_edit)
        self.inputs[key] = input_field
        self.field_types[key] = kind
        hbox.addWidget(label)
        hbox.addWidget(input_field)
        layout.addLayout(hbox)

    def init_ui(self):
        splitter = QSplitter(Qt.Horizontal)

        # Left panel: inputs
        left_widget = QWidget()
        left_layout = QVBoxLayout(left_widget)

        details_group = QGroupBox("Print Details")
        details_layout = QVBoxLayout()
        for label_text, key, kind in self.DETAIL_FIELDS:
            self._add_field(details_layout, label_text, key, kind)

        currency_row = QHBoxLayout()
        currency_label = QLabel("Currency")
        currency_label.setMinimumWidth(200)
        self.currency_combo = QComboBox()
        for code, currency in CURRENCIES.items():
            self.currency_combo.addItem(f"{code} - {currency.name}", code)
        self.currency_combo.currentIndexChanged.connect(self.on_currency_changed)
        currency_row.addWidget(currency_label)
        currency_row.addWidget(self.currency_combo)
        details_layout.addLayout(currency_row)
        details_group.setLayout(details_layout)
        left_layout.addWidget(details_group)

        material_group = QGroupBox("Material")
        material_layout = QVBoxLayout()
        for label_text, key, kind in self.MATERIAL_FIELDS:
            self._add_field(material_layout, label_text, key, kind)
        material_group.setLayout(material_layout)
        left_layout.addWidget(material_group)

        for title, include_key, fields in self.OPTIONAL_SECTIONS:
            group = QGroupBox(title)
            group_layout = QVBoxLayout()
            checkbox = QCheckBox(f"Include {title.lower()} cost")
            checkbox.stateChanged.connect(self.on_edit)
            self.checkboxes[include_key] = checkbox
            group_layout.addWidget(checkbox)
            for label_text, key, kind in fields:
                self._add_field(group_layout, label_text, key, kind)
            group.setLayout(group_layout)
            left_layout.addWidget(group)

        markup_group = QGroupBox("Markup")
        markup_layout = QVBoxLayout()
        self._add_field(markup_layout, "Markup (%)", "markup", float)
        markup_group.setLayout(markup_layout)
        left_layout.addWidget(markup_group)
        left_layout.addStretch(1)

        # Right panel: breakdown and actions
        right_widget = QWidget()
        right_layout = QVBoxLayout(right_widget)

        title = QLabel("Cost Breakdown")
        title.setStyleSheet("font-size: 16pt; font-weight: bold; color: #333;")
        right_layout.addWidget(title)

        self.result_label = QLabel("")
        self.result_label.setStyleSheet(
            "font-weight: bold; font-size: 12pt; background-color: #f0f0f0; padding: 15px; border: 1px solid #ddd;"
        )
        self.result_label.setAlignment(Qt.AlignLeft)
        right_layout.addWidget(self.result_label)

        self.save_button = QPushButton("Save to History")
        self.save_button.clicked.connect(self.save_to_history)
        self.save_button.setStyleSheet(
            "background-color: #FF9800; color: white; padding: 10px; font-size: 14pt; font-weight: bold;"
        )
        right_layout.addWidget(self.save_button)

        self.pdf_button = QPushButton("Generate Receipt (PDF)")
        self.pdf_button.clicked.connect(self.generate_pdf)
        self.pdf_button.setStyleSheet(
            "background-color: #4CAF50; color: white; padding: 10px; font-size: 14pt; font-weight: bold;"
        )
        right_layout.addWidget(self.pdf_button)
        right_layout.addStretch(1)

        splitter.addWidget(left_widget)
        splitter.addWidget(right_widget)

        main_layout = QVBoxLayout(self)
        main_layout.addWidget(splitter)
        self.setLayout(main_layout)

    def load_from_input(self):
        """Refresh every widget from ``cost_input`` without triggering edits."""
        data = self.cost_input
        for key, field in self.inputs.items():
            value = getattr(data, key)
            field.setText(f"{value:g}" if isinstance(value, float) else str(value))
        for key, checkbox in self.checkboxes.items():
            checkbox.blockSignals(True)
            checkbox.setChecked(getattr(data, key))
            checkbox.blockSignals(False)
        self.currency_combo.blockSignals(True)
        self.currency_combo.setCurrentIndex(self.currency_combo.findData(data.currency))
        self.currency_combo.blockSignals(False)
        self.update_breakdown()

    def on_edit(self, *_):
        data = self.cost_input
        for key, field in self.inputs.items():
            kind = self.field_types[key]
            text = field.text().strip()
            if kind is str:
                setattr(data, key, text)
                continue
            setattr(data, key, parse_field(text, kind))
        for key, checkbox in self.checkboxes.items():
            setattr(data, key, checkbox.isChecked())
        self.update_breakdown()

    def on_currency_changed(self, index):
        converted = convert_currency(self.cost_input, self.currency_combo.itemData(index))
        for key, value in vars(converted).items():
            setattr(self.cost_input, key, value)
        self.load_from_input()

    def update_breakdown(self):
        self.costs = calculate_costs(self.cost_input)
        self.result_label.setText(
            format_breakdown(self.costs, CURRENCIES[self.cost_input.currency])
        )

    def current_entry(self):
        return HistoryEntry.create(
            data=replace(self.cost_input),
            costs=self.costs,
            currency=CURRENCIES[self.cost_input.currency],
        )

    def save_to_history(self):
        if not self.cost_input.print_name.strip():
            QMessageBox.warning(self, "Save Error", "Please enter a Print Name before saving.")
            return
        self.store.append(self.current_entry())
        self.history_saved.emit()
        QMessageBox.information(self, "Success!", "Calculation saved to history.")
        self.window().status_message.setText("Calculation saved to history")

    def generate_pdf(self):
        if not self.cost_input.print_name.strip():
            QMessageBox.warning(self, "PDF Generation Error",
                                "Please enter a Print Name to generate a receipt.")
            return

        filename, _ = QFileDialog.getSaveFileName(
            self, "Save Receipt",
            receipt_filename(self.cost_input.print_name),
            "PDF Files (*.pdf)"
        )
        if not filename:
            return  # User canceled

        try:
            build_receipt(self.current_entry(), filename)
        except Exception as e:
            logger.exception("Failed to generate receipt")
            QMessageBox.critical(self, "PDF Error", f"Failed to generate PDF:\n{str(e)}")
            self.window().status_message.setText("Error generating receipt")
            return

        QMessageBox.information(self, "Receipt Generated",
                                f"Receipt saved successfully as:\n{filename}")
        self.window().status_message.setText("Receipt generated successfully")


class HistoryTab(QWidget):
    def __init__(self, store):
        super().__init__()
        self.store = store
        self.init_ui()
        self.refresh()

    def init_ui(self):
        layout = QVBoxLayout()

        title = QLabel("Saved Calculations")
        title.setStyleSheet("font-size: 16pt; font-weight: bold; color: #333;")
        layout.addWidget(title)

        self.history_list = QListWidget()
        self.history_list.itemDoubleClicked.connect(lambda item: self.view_selected())
        layout.addWidget(self.history_list, 1)

        buttons = QHBoxLayout()
        self.view_button = QPushButton("View")
        self.view_button.clicked.connect(self.view_selected)
        self.delete_button = QPushButton("Delete")
        self.delete_button.clicked.connect(self.delete_selected)
        buttons.addWidget(self.view_button)
        buttons.addWidget(self.delete_button)
        buttons.addStretch()
        layout.addLayout(buttons)

        self.setLayout(layout)

    def refresh(self, entries=None):
        self.entries = self.store.get_all() if entries is None else entries
        self.history_list.clear()
        for entry in self.entries:
            currency = entry.currency
            item = QListWidgetItem(
                f"{entry.data.print_name}  ({entry.data.purchase_date or 'N/A'})"
                f"  -  {currency.symbol} {entry.costs.final_price:.2f}"
            )
            item.setData(Qt.UserRole, entry.id)
            self.history_list.addItem(item)

    def selected_entry(self):
        item = self.history_list.currentItem()
        if item is None:
            return None
        entry_id = item.data(Qt.UserRole)
        return next((entry for entry in self.entries if entry.id == entry_id), None)

    def view_selected(self):
        entry = self.selected_entry()
        if entry is None:
            return
        message = (
            f"Print Name: {entry.data.print_name}\n"
            f"Customer Name: {entry.data.customer_name or 'N/A'}\n"
            f"Date: {entry.data.purchase_date or 'N/A'}\n\n"
            + format_breakdown(entry.costs, entry.currency)
        )
        QMessageBox.information(self, "Saved Print Details", message)

    def delete_selected(self):
        entry = self.selected_entry()
        if entry is None:
            return
        self.refresh(self.store.remove(entry.id))
        QMessageBox.information(self, "Deleted", "Item has been removed from history.")


class MainApp(QWidget):
    def __init__(self, settings):
        super().__init__()
        self.setWindowTitle("PrintCost Studio")
        self.setGeometry(100, 100, 1200, 750)
        self.cost_input = CostInput(purchase_date=date.today().isoformat())
        self.store = HistoryStore(QSettingsBackend())
        self.deep_scanner = DeepScanner(settings)
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout(self)

        self.tabs = QTabWidget()
        self.tabs.setTabPosition(QTabWidget.North)

        self.tab1 = GCodeLoaderTab(self.cost_input, self.deep_scanner)
        self.tab2 = PricingTab(self.cost_input, self.store)
        self.tab3 = HistoryTab(self.store)

        self.tabs.addTab(self.tab1, "G-code Loader")
        self.tabs.addTab(self.tab2, "Pricing Calculator")
        self.tabs.addTab(self.tab3, "History")

        # Connect signals
        self.tab1.pricing_requested.connect(self.handle_pricing_request)
        self.tab2.history_saved.connect(self.tab3.refresh)

        self.status_bar = QStatusBar()
        self.status_message = QLabel("Ready")
        self.status_bar.addWidget(self.status_message, 1)

        layout.addWidget(self.tabs)
        layout.addWidget(self.status_bar)
        self.setLayout(layout)

    def handle_pricing_request(self):
        self.tab2.load_from_input()
        self.tabs.setCurrentIndex(1)


def main():
    settings = load_settings()
    configure_logging(settings)

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    window = MainApp(settings)
    window.show()
    sys.exit(app.exec_())
