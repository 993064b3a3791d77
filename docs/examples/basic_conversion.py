"""Basic SVG to raster conversion examples."""

from svg2raster import Color, OutputFormat, SVGScene, export

# Example 1: Every format at the SVG's intrinsic size
# Output files are written as out/input.<extension>
print("Example 1: All formats")
scene = SVGScene.from_file("input.svg")
results = export(scene, "out", "input")
print(f"✓ Generated {sum(result.ok for result in results)} of {len(results)} files")

# Example 2: Selected formats at a fixed width
# The height follows the SVG's aspect ratio
print("\nExample 2: PNG and JPEG, 512 pixels wide")
export(scene, "out", "input_512", formats=[OutputFormat.PNG, OutputFormat.JPEG], width=512)
print("✓ Created out/input_512.png and out/input_512.jpeg")

# Example 3: Scale factor and background color
print("\nExample 3: 2x with a solid background")
export(scene, "out", "input_2x", scale=2.0, background=Color(0x33, 0x66, 0x99))
print("✓ Created 2x images on #336699")

# Example 4: Inspect failures
# A failing format does not stop the others
print("\nExample 4: Failures")
for result in export(scene, "out", "input"):
    if not result.ok:
        print(f"⚠ {result.output_format}: {result.error}")
